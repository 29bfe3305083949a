#!/usr/bin/env python3

import contextlib
import os
import shutil
import tempfile

from vidbboxlib.core import utils
from vidbboxlib.core.errors import BackendFailure

FRAME_PATTERN = "frame%06d.png"

#============================================

@contextlib.contextmanager
def frame_directory(cache_dir: str = None, keep_temp: bool = False):
	"""
	Scoped temporary directory for rasterized frames.

	The directory is removed on every exit path unless keep_temp is set.
	"""
	if cache_dir is not None:
		os.makedirs(cache_dir, exist_ok=True)
	temp_dir = tempfile.mkdtemp(prefix="vbbox.", dir=cache_dir)
	utils.log(f"creating tmp dir: {temp_dir}", level=1)
	try:
		yield temp_dir
	finally:
		if keep_temp:
			utils.log(f"keeping tmp dir: {temp_dir}", level=1)
		else:
			shutil.rmtree(temp_dir, ignore_errors=True)

#============================================

def build_extract_command(input_file: str, out_dir: str, start_seconds: float,
	interval_seconds: float, max_samples: int = None) -> list:
	cmd = ["ffmpeg", "-nostdin", "-hide_banner", "-loglevel", "error", "-y"]
	cmd += ["-ss", f"{start_seconds:.3f}"]
	cmd += ["-i", input_file]
	cmd += ["-an", "-sn", "-dn"]
	cmd += ["-vf", f"fps=1/{interval_seconds:g}"]
	if max_samples is not None:
		cmd += ["-frames:v", str(max_samples)]
	cmd.append(os.path.join(out_dir, FRAME_PATTERN))
	return cmd

#============================================

def list_frames(out_dir: str) -> list:
	names = []
	for name in os.listdir(out_dir):
		if name.startswith("."):
			continue
		if not name.endswith(".png"):
			continue
		names.append(name)
	names.sort()
	return [os.path.join(out_dir, name) for name in names]

#============================================

def extract_frames(input_file: str, out_dir: str, start_seconds: float = 10.0,
	interval_seconds: float = 10.0, max_samples: int = None) -> list:
	"""
	Rasterize one frame every interval_seconds, starting at start_seconds.

	Args:
		input_file: Video file path.
		out_dir: Existing directory that receives the PNG frames.
		start_seconds: Offset of the first sample.
		interval_seconds: Spacing between samples.
		max_samples: Optional cap on the number of frames.

	Returns:
		list: Frame image paths in presentation order. Empty when the clip
			ends before start_seconds.
	"""
	cmd = build_extract_command(input_file, out_dir, start_seconds,
		interval_seconds, max_samples)
	proc = utils.run_process(cmd)
	if proc.returncode != 0:
		stderr_text = (proc.stderr or "").strip()
		if stderr_text != "":
			utils.log(stderr_text, level=3)
		last_line = stderr_text.splitlines()[-1] if stderr_text else ""
		raise BackendFailure(f"ffmpeg: exited with {proc.returncode}: {last_line}".rstrip(": "))
	return list_frames(out_dir)
