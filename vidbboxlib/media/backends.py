#!/usr/bin/env python3

"""
Detection backends.

Each backend turns a video file into a SampleSet: the original frame size
plus a lazy stream of CropRect/None samples for the aggregator. Only one
backend is used per run and it is chosen before any video is analyzed.
"""

import contextlib
import os
from dataclasses import dataclass, field
from typing import Iterable, Optional

from tqdm import tqdm

from vidbboxlib.core import utils
from vidbboxlib.core.errors import ConfigurationError
from vidbboxlib.core.geometry import FrameSize, crop_from_margins
from vidbboxlib.media import ffmpeg_frames
from vidbboxlib.media import frame_trim
from vidbboxlib.media import handbrake

#============================================

@dataclass
class SampleSet:
	frame: Optional[FrameSize]
	samples: Iterable = field(default_factory=list)
	reason: str = "unknown"

#============================================

class FrameSamplerBackend():
	"""Rasterize frames with ffmpeg and fuzzy-trim each one."""
	name = "ffmpeg"

	def __init__(self, settings: dict):
		self.start_seconds = settings["sampler"]["start_seconds"]
		self.interval_seconds = settings["sampler"]["interval_seconds"]
		self.max_samples = settings["sampler"]["max_samples"]
		self.fuzz_percent = settings["trim"]["fuzz_percent"]
		self.pre_trim_x = settings["trim"]["pre_trim_x"]
		self.pre_trim_y = settings["trim"]["pre_trim_y"]
		self.min_content_width = settings["trim"]["min_content_width"]
		self.cache_dir = settings["io"]["cache_dir"]
		self.keep_temp = settings["io"]["keep_temp"]
		self.progress = settings["io"]["progress"]

	#============================
	@contextlib.contextmanager
	def open_samples(self, input_file: str):
		with ffmpeg_frames.frame_directory(self.cache_dir, self.keep_temp) as temp_dir:
			frame_paths = ffmpeg_frames.extract_frames(input_file, temp_dir,
				start_seconds=self.start_seconds, interval_seconds=self.interval_seconds,
				max_samples=self.max_samples)
			if len(frame_paths) == 0:
				yield SampleSet(frame=None, reason="no frames, too short?")
				return
			frame = frame_trim.frame_size(frame_paths[0])
			utils.log(f"{os.path.basename(input_file)}: orig size: {frame}", level=2)
			yield SampleSet(frame=frame, samples=self._detect_frames(frame_paths))

	#============================
	def _detect_frames(self, frame_paths: list):
		show_progress = self.progress and not utils.is_quiet_mode()
		for frame_path in tqdm(frame_paths, disable=not show_progress, leave=False,
			unit="frame"):
			rect = frame_trim.detect_crop(frame_path, fuzz_percent=self.fuzz_percent,
				pre_trim_x=self.pre_trim_x, pre_trim_y=self.pre_trim_y,
				min_content_width=self.min_content_width)
			utils.log(f"{os.path.basename(frame_path)}: {rect}", level=3)
			yield rect

#============================================

class AutocropScannerBackend():
	"""Use HandBrakeCLI's own autocrop report as a single sample."""
	name = "handbrake"

	def __init__(self, settings: dict):
		self.previews = settings["handbrake"]["previews"]

	#============================
	@contextlib.contextmanager
	def open_samples(self, input_file: str):
		report = handbrake.scan_autocrop(input_file, previews=self.previews)
		if report is None:
			yield SampleSet(frame=None)
			return
		(frame, margins) = report
		utils.log(f"{os.path.basename(input_file)}: autocrop margin: {margins}", level=2)
		yield SampleSet(frame=frame, samples=[crop_from_margins(frame, margins)])

#============================================

BACKEND_TOOLS = {
	"handbrake": ("HandBrakeCLI", AutocropScannerBackend),
	"ffmpeg": ("ffmpeg", FrameSamplerBackend),
}

#============================================

def select_backend(settings: dict):
	"""
	Pick the detection backend for this run.

	With backend `auto`, HandBrakeCLI is preferred over ffmpeg.

	Raises:
		ConfigurationError: The requested tool, or every tool, is missing.
	"""
	choice = settings["backend"]
	if choice == "auto":
		for name in ("handbrake", "ffmpeg"):
			(tool, backend_class) = BACKEND_TOOLS[name]
			if utils.which(tool) is not None:
				utils.log(f"using {tool}", level=1)
				return backend_class(settings)
		raise ConfigurationError("neither HandBrakeCLI nor ffmpeg found on $PATH.")
	if choice not in BACKEND_TOOLS:
		raise ConfigurationError(f"unknown backend: {choice}")
	(tool, backend_class) = BACKEND_TOOLS[choice]
	if utils.which(tool) is None:
		raise ConfigurationError(f"{tool} not found on $PATH.")
	return backend_class(settings)
