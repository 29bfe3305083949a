#!/usr/bin/env python3

from dataclasses import dataclass
from fractions import Fraction
from typing import Optional

from vidbboxlib.core import utils
from vidbboxlib.core.geometry import ContentBox, EdgeMargins, FrameSize

# aspects are compared in hundredths after rounding
TOLERANCE_HUNDREDTHS = 1

#============================================

@dataclass(frozen=True)
class Matched:
	original_aspect: int

	@property
	def original_text(self) -> str:
		return utils.format_hundredths(self.original_aspect)

#============================================

@dataclass(frozen=True)
class Mismatched:
	original_aspect: int
	content_aspect: int
	margins: EdgeMargins

	@property
	def original_text(self) -> str:
		return utils.format_hundredths(self.original_aspect)

	@property
	def content_text(self) -> str:
		return utils.format_hundredths(self.content_aspect)

#============================================

@dataclass(frozen=True)
class Unknown:
	reason: str = "unknown"

#============================================

def aspect_hundredths(width: int, height: int) -> int:
	"""
	Aspect ratio rounded half-up to two decimals, as integer hundredths.

	A zero height yields 0 rather than dividing by zero.
	"""
	if height == 0:
		return 0
	return utils.round_half_up_fraction(Fraction(width, height) * 100)

#============================================

class AspectComparator():
	def __init__(self, tolerance_hundredths: int = TOLERANCE_HUNDREDTHS):
		self.tolerance_hundredths = tolerance_hundredths

	#============================
	def compare(self, frame: FrameSize, box: Optional[ContentBox]):
		"""
		Classify a video as Matched, Mismatched or Unknown.

		Args:
			frame: Original frame size.
			box: Aggregated content box, or None when no frame had content.

		Returns:
			Matched | Mismatched | Unknown
		"""
		if box is None:
			return Unknown()
		original = aspect_hundredths(frame.width, frame.height)
		if original <= 0:
			return Unknown(reason=f"degenerate frame size {frame}")
		content = aspect_hundredths(box.max_width, box.max_height)
		if abs(content - original) > self.tolerance_hundredths:
			return Mismatched(original_aspect=original, content_aspect=content,
				margins=box.margins)
		return Matched(original_aspect=original)
