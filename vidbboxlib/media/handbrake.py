#!/usr/bin/env python3

import re

from vidbboxlib.core import utils
from vidbboxlib.core.errors import BackendFailure
from vidbboxlib.core.geometry import EdgeMargins, FrameSize

SCAN_SIZE_RE = re.compile(r"scan: .*?, (\d+)x(\d+), ")
AUTOCROP_RE = re.compile(r"autocrop = (\d+)/(\d+)/(\d+)/(\d+)")

#============================================

def parse_scan_output(text: str) -> tuple | None:
	"""
	Pull the source size and autocrop margins out of a HandBrakeCLI scan log.

	The autocrop report is ordered top/bottom/left/right.

	Args:
		text: Combined stdout and stderr of `HandBrakeCLI --scan`.

	Returns:
		tuple | None: (FrameSize, EdgeMargins), or None when the log has no
			scan line with both a size and an autocrop report.

	Raises:
		BackendFailure: The size is zero or the margins leave no picture.
	"""
	for line in text.splitlines():
		if "scan:" not in line:
			continue
		size_match = SCAN_SIZE_RE.search(line)
		crop_match = AUTOCROP_RE.search(line)
		if size_match is None or crop_match is None:
			continue
		width = int(size_match.group(1))
		height = int(size_match.group(2))
		if width <= 0 or height <= 0:
			raise BackendFailure(f"HandBrakeCLI: invalid source size {width}x{height}")
		(top, bottom, left, right) = [int(value) for value in crop_match.groups()]
		if top + bottom >= height or left + right >= width:
			raise BackendFailure(f"HandBrakeCLI: autocrop {top}/{bottom}/{left}/{right} "
				f"leaves no picture in {width}x{height}")
		frame = FrameSize(width=width, height=height)
		margins = EdgeMargins(top=top, left=left, bottom=bottom, right=right)
		return (frame, margins)
	return None

#============================================

def build_scan_command(input_file: str, previews: int = 30) -> list:
	return ["HandBrakeCLI", "--scan", "--previews", str(previews), "-i", input_file]

#============================================

def scan_autocrop(input_file: str, previews: int = 30) -> tuple | None:
	"""
	Ask HandBrakeCLI for its own multi-frame autocrop estimate.

	Returns:
		tuple | None: (FrameSize, EdgeMargins), or None if HandBrake had no
			crop to report.
	"""
	cmd = build_scan_command(input_file, previews)
	proc = utils.run_process(cmd, merge_output=True)
	output = proc.stdout or ""
	utils.log(output.strip(), level=3)
	report = parse_scan_output(output)
	if report is None and proc.returncode != 0:
		raise BackendFailure(f"HandBrakeCLI: exited with {proc.returncode}")
	return report
