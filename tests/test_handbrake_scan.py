#!/usr/bin/env python3

"""
Pytest coverage for HandBrakeCLI scan parsing.
"""

# Standard Library
import os
import subprocess
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from vidbboxlib.core.errors import BackendFailure
from vidbboxlib.core.geometry import CropRect
from vidbboxlib.core.geometry import EdgeMargins
from vidbboxlib.core.geometry import FrameSize
from vidbboxlib.core.geometry import crop_from_margins
from vidbboxlib.media import handbrake

SCAN_LOG = "\n".join([
	"[12:00:01] hb_init: starting libhb thread",
	"[12:00:02] scan: DVD has 1 title(s)",
	"[12:00:03] scan: decoding previews for title 1",
	"[12:00:05] scan: 30 previews, 720x480, 29.970 fps, autocrop = 60/58/0/2, aspect 16:9, PAR 32:27",
	"+ title 1:",
	"  + size: 720x480, pixel aspect: 32/27, display aspect: 1.78, 29.970 fps",
	"",
])

#============================================

def test_parse_scan_output() -> None:
	(frame, margins) = handbrake.parse_scan_output(SCAN_LOG)
	assert frame == FrameSize(720, 480)
	assert margins == EdgeMargins(top=60, left=0, bottom=58, right=2)

#============================================

def test_parse_scan_output_without_autocrop() -> None:
	text = "[12:00:05] scan: 30 previews, 720x480, 29.970 fps, aspect 16:9\n"
	assert handbrake.parse_scan_output(text) is None
	assert handbrake.parse_scan_output("") is None

#============================================

def test_parse_scan_output_zero_size_fails() -> None:
	text = "scan: 30 previews, 0x480, 29.970 fps, autocrop = 0/0/0/0, aspect 4:3\n"
	with pytest.raises(BackendFailure):
		handbrake.parse_scan_output(text)

#============================================

def test_parse_scan_output_impossible_autocrop_fails() -> None:
	text = "scan: 30 previews, 1920x1080, 25.000 fps, autocrop = 600/600/0/0, aspect 16:9\n"
	with pytest.raises(BackendFailure):
		handbrake.parse_scan_output(text)
	text = "scan: 30 previews, 720x480, 25.000 fps, autocrop = 0/0/360/360, aspect 4:3\n"
	with pytest.raises(BackendFailure):
		handbrake.parse_scan_output(text)

#============================================

def test_crop_from_margins() -> None:
	(frame, margins) = handbrake.parse_scan_output(SCAN_LOG)
	rect = crop_from_margins(frame, margins)
	assert rect == CropRect(width=718, height=362, offset_x=0, offset_y=60)

#============================================

def test_scan_autocrop_uses_previews(monkeypatch) -> None:
	seen = {}

	def fake_run(cmd: list, merge_output: bool = False):
		seen["cmd"] = cmd
		seen["merge_output"] = merge_output
		return subprocess.CompletedProcess(cmd, 0, stdout=SCAN_LOG, stderr=None)

	monkeypatch.setattr(handbrake.utils, "run_process", fake_run)
	report = handbrake.scan_autocrop("movie.vob", previews=12)
	assert seen["cmd"] == ["HandBrakeCLI", "--scan", "--previews", "12", "-i", "movie.vob"]
	assert seen["merge_output"] is True
	assert report[0] == FrameSize(720, 480)

#============================================

def test_scan_autocrop_failure(monkeypatch) -> None:
	def fake_run(cmd: list, merge_output: bool = False):
		return subprocess.CompletedProcess(cmd, 3, stdout="No title found.\n", stderr=None)

	monkeypatch.setattr(handbrake.utils, "run_process", fake_run)
	with pytest.raises(BackendFailure):
		handbrake.scan_autocrop("movie.vob")

#============================================

def test_scan_autocrop_no_report(monkeypatch) -> None:
	def fake_run(cmd: list, merge_output: bool = False):
		return subprocess.CompletedProcess(cmd, 0, stdout="scan: nothing useful\n", stderr=None)

	monkeypatch.setattr(handbrake.utils, "run_process", fake_run)
	assert handbrake.scan_autocrop("movie.vob") is None
