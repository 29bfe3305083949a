#!/usr/bin/env python3

"""
Fuzzy trim of a single rasterized frame.

Works like ImageMagick's `-shave WxH -fuzz N% -trim`: the top-left pixel
is taken as the background color, every pixel within the fuzz distance of it
counts as background, and the content rectangle is the span of everything
else.
"""

# Standard Library
import math

# PIP3 modules
import numpy
import PIL.Image

# local repo modules
from vidbboxlib.core.aggregator import MIN_CONTENT_WIDTH
from vidbboxlib.core.geometry import CropRect, FrameSize

MAX_RGB_DISTANCE = math.sqrt(3.0) * 255.0

#============================================

def load_rgb_array(frame_path: str) -> numpy.ndarray:
	with PIL.Image.open(frame_path) as image:
		rgb = image.convert("RGB")
		pixels = numpy.asarray(rgb, dtype=numpy.int32)
	return pixels

#============================================

def frame_size(frame_path: str) -> FrameSize:
	with PIL.Image.open(frame_path) as image:
		(width, height) = image.size
	return FrameSize(width=int(width), height=int(height))

#============================================

def shave(pixels: numpy.ndarray, pre_trim_x: int, pre_trim_y: int) -> numpy.ndarray:
	"""
	Drop pre_trim_x columns from both sides and pre_trim_y rows from top and bottom.
	"""
	height = pixels.shape[0]
	width = pixels.shape[1]
	if 2 * pre_trim_x >= width or 2 * pre_trim_y >= height:
		return pixels[0:0, 0:0]
	return pixels[pre_trim_y:height - pre_trim_y, pre_trim_x:width - pre_trim_x]

#============================================

def fuzzy_trim(pixels: numpy.ndarray, fuzz_percent: float) -> CropRect | None:
	"""
	Find the bounding rectangle of non-background pixels.

	Args:
		pixels: HxWx3 integer RGB array.
		fuzz_percent: Color slack, as a percentage of the largest RGB distance.

	Returns:
		CropRect | None: Content rectangle in array coordinates, None if blank.
	"""
	if pixels.shape[0] == 0 or pixels.shape[1] == 0:
		return None
	background = pixels[0, 0, :]
	diff = pixels - background
	dist_sq = numpy.sum(diff * diff, axis=2)
	limit = (fuzz_percent / 100.0) * MAX_RGB_DISTANCE
	content = dist_sq > (limit * limit)
	rows = numpy.flatnonzero(content.any(axis=1))
	if rows.size == 0:
		return None
	cols = numpy.flatnonzero(content.any(axis=0))
	return CropRect(
		width=int(cols[-1] - cols[0] + 1),
		height=int(rows[-1] - rows[0] + 1),
		offset_x=int(cols[0]),
		offset_y=int(rows[0]),
	)

#============================================

def detect_crop(frame_path: str, fuzz_percent: float = 10.0, pre_trim_x: int = 0,
	pre_trim_y: int = 0, min_content_width: int = MIN_CONTENT_WIDTH) -> CropRect | None:
	"""
	Detect the content rectangle of one frame image.

	Args:
		frame_path: Image file (any format Pillow reads).
		fuzz_percent: Color slack for background pixels.
		pre_trim_x: Columns ignored on the left and right edges.
		pre_trim_y: Rows ignored on the top and bottom edges.
		min_content_width: Narrower detections are treated as blank.

	Returns:
		CropRect | None: Rectangle in absolute frame coordinates.
	"""
	pixels = load_rgb_array(frame_path)
	shaved = shave(pixels, pre_trim_x, pre_trim_y)
	rect = fuzzy_trim(shaved, fuzz_percent)
	if rect is None or rect.width < min_content_width:
		return None
	return rect.shifted(pre_trim_x, pre_trim_y)
