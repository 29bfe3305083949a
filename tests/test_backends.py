#!/usr/bin/env python3

"""
Pytest coverage for the ffmpeg sampler backend without running ffmpeg.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from vidbboxlib.core import config
from vidbboxlib.core import utils
from vidbboxlib.core.analyzer import VideoAnalyzer
from vidbboxlib.core.comparator import Unknown
from vidbboxlib.core.errors import BackendFailure
from vidbboxlib.media import backends
from vidbboxlib.media import ffmpeg_frames

#============================================

@pytest.fixture(autouse=True)
def _reset_verbosity():
	utils.set_verbosity(0)
	yield
	utils.set_verbosity(0)

#============================================

def _sampler(tmp_path, keep_temp: bool = False) -> backends.FrameSamplerBackend:
	settings = config.build_settings(None)
	settings["io"]["cache_dir"] = str(tmp_path / "cache")
	settings["io"]["keep_temp"] = keep_temp
	return backends.FrameSamplerBackend(settings)

#============================================

def _clip(tmp_path) -> str:
	path = tmp_path / "clip.mkv"
	path.write_bytes(b"")
	return str(path)

#============================================

def test_no_extracted_frames_is_unknown(monkeypatch, tmp_path) -> None:
	seen = {}

	def fake_extract(input_file, out_dir, **kwargs):
		seen["out_dir"] = out_dir
		return []

	monkeypatch.setattr(backends.ffmpeg_frames, "extract_frames", fake_extract)
	result = VideoAnalyzer(_sampler(tmp_path)).analyze(_clip(tmp_path))
	assert result.failed is False
	assert result.verdict == Unknown(reason="no frames, too short?")
	assert result.status == "unknown"
	assert os.path.basename(seen["out_dir"]).startswith("vbbox.")
	assert os.listdir(str(tmp_path / "cache")) == []

#============================================

def test_extract_failure_removes_temp_dir(monkeypatch, tmp_path) -> None:
	def fake_extract(input_file, out_dir, **kwargs):
		(tmp_path / "cache" / os.path.basename(out_dir) / "frame000001.png").write_bytes(b"")
		raise BackendFailure("ffmpeg: exited with 1")

	monkeypatch.setattr(backends.ffmpeg_frames, "extract_frames", fake_extract)
	result = VideoAnalyzer(_sampler(tmp_path)).analyze(_clip(tmp_path))
	assert result.failed is True
	assert result.error == "ffmpeg: exited with 1"
	assert os.listdir(str(tmp_path / "cache")) == []

#============================================

def test_extract_failure_keeps_temp_dir_when_asked(monkeypatch, tmp_path) -> None:
	def fake_extract(input_file, out_dir, **kwargs):
		raise BackendFailure("ffmpeg: exited with 1")

	monkeypatch.setattr(backends.ffmpeg_frames, "extract_frames", fake_extract)
	result = VideoAnalyzer(_sampler(tmp_path, keep_temp=True)).analyze(_clip(tmp_path))
	assert result.failed is True
	kept = os.listdir(str(tmp_path / "cache"))
	assert len(kept) == 1
	assert kept[0].startswith("vbbox.")

#============================================

def test_frame_directory_cleans_up_on_error(tmp_path) -> None:
	cache_dir = str(tmp_path / "cache")
	with pytest.raises(BackendFailure):
		with ffmpeg_frames.frame_directory(cache_dir) as temp_dir:
			assert os.path.isdir(temp_dir)
			raise BackendFailure("boom")
	assert os.listdir(cache_dir) == []
