#!/usr/bin/env python3

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from vidbboxlib.core import utils
from vidbboxlib.core.aggregator import BoundingBoxAggregator
from vidbboxlib.core.comparator import AspectComparator, Matched, Mismatched, Unknown
from vidbboxlib.core.errors import BackendFailure
from vidbboxlib.core.geometry import ContentBox, FrameSize

#============================================

@dataclass
class AnalysisResult:
	input_file: str
	frame: FrameSize | None = None
	box: ContentBox | None = None
	verdict: object = None
	error: str | None = None

	#============================
	@property
	def status(self) -> str:
		if self.error is not None:
			return "failed"
		if isinstance(self.verdict, Mismatched):
			return "mismatched"
		if isinstance(self.verdict, Matched):
			return "unchanged"
		return "unknown"

	#============================
	@property
	def failed(self) -> bool:
		return self.error is not None

#============================================

class VideoAnalyzer():
	"""
	Drive one backend, the aggregator and the comparator for each video.
	"""
	def __init__(self, backend, aggregator: BoundingBoxAggregator = None,
		comparator: AspectComparator = None):
		self.backend = backend
		self.aggregator = aggregator or BoundingBoxAggregator()
		self.comparator = comparator or AspectComparator()

	#============================
	def analyze(self, input_file: str) -> AnalysisResult:
		"""
		Analyze one video. Backend errors become a failed result, never an exception.
		"""
		# directories pass through, HandBrakeCLI reads DVD folders
		if not os.path.exists(input_file):
			return AnalysisResult(input_file=input_file, error="file not found")
		try:
			with self.backend.open_samples(input_file) as sample_set:
				if sample_set.frame is None:
					return AnalysisResult(input_file=input_file,
						verdict=Unknown(reason=sample_set.reason))
				frame = sample_set.frame
				box = self.aggregator.aggregate(frame, sample_set.samples)
		except (BackendFailure, OSError) as error:
			return AnalysisResult(input_file=input_file, error=str(error))
		verdict = self.comparator.compare(frame, box)
		return AnalysisResult(input_file=input_file, frame=frame, box=box, verdict=verdict)

	#============================
	def analyze_many(self, input_files: list, jobs: int = 1) -> list:
		"""
		Analyze several videos, results in input order.
		"""
		if jobs <= 1 or len(input_files) <= 1:
			return [self.analyze(input_file) for input_file in input_files]
		with ThreadPoolExecutor(max_workers=jobs) as pool:
			return list(pool.map(self.analyze, input_files))

#============================================

def format_report_line(result: AnalysisResult) -> str:
	"""
	One human-readable line per video.
	"""
	name = result.input_file
	if result.error is not None:
		return f"{name}: failed: {result.error}"
	verdict = result.verdict
	if isinstance(verdict, Mismatched):
		return (f"{name}: size: {result.frame} -> {result.box.size_text}; "
			f"aspect: {verdict.original_text} -> {verdict.content_text}; "
			f"margin: {verdict.margins}")
	if isinstance(verdict, Matched):
		return f"{name}: unchanged: {verdict.original_text}"
	reason = verdict.reason if isinstance(verdict, Unknown) else "unknown"
	return f"{name}: {reason}"

#============================================

def report_result(result: AnalysisResult) -> None:
	utils.log(format_report_line(result), level=0)
	if result.box is not None and result.box.inconsistent:
		utils.log(f"{result.input_file}: warning: detected content exceeded the frame, "
			"margins clamped", level=0)
	return

#============================================

def result_to_dict(result: AnalysisResult) -> dict:
	"""
	Plain mapping of a result, for the YAML report.
	"""
	entry = {
		"file": result.input_file,
		"status": result.status,
	}
	if result.error is not None:
		entry["message"] = result.error
		return entry
	if isinstance(result.verdict, Unknown):
		entry["message"] = result.verdict.reason
	if result.frame is not None:
		entry["original_size"] = [result.frame.width, result.frame.height]
	if result.box is not None:
		entry["content_size"] = [result.box.max_width, result.box.max_height]
		margins = result.box.margins
		entry["margins"] = {
			"top": margins.top,
			"left": margins.left,
			"bottom": margins.bottom,
			"right": margins.right,
		}
		entry["inconsistent"] = result.box.inconsistent
		entry["samples"] = result.box.samples
	if isinstance(result.verdict, (Matched, Mismatched)):
		entry["original_aspect"] = result.verdict.original_text
	if isinstance(result.verdict, Mismatched):
		entry["content_aspect"] = result.verdict.content_text
	return entry
