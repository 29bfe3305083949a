#!/usr/bin/env python3

"""
Value types shared by the aggregator, the comparator and the backends.

All rectangles use absolute frame coordinates with the origin at the
top-left corner of the undecoded frame.
"""

from dataclasses import dataclass

#============================================

@dataclass(frozen=True)
class FrameSize:
	width: int
	height: int

	def __post_init__(self):
		if int(self.width) <= 0 or int(self.height) <= 0:
			raise ValueError(f"frame size must be positive, got {self.width}x{self.height}")

	def __str__(self) -> str:
		return f"{self.width}x{self.height}"

#============================================

@dataclass(frozen=True)
class CropRect:
	"""Detected content of a single frame."""
	width: int
	height: int
	offset_x: int
	offset_y: int

	#============================
	def shifted(self, dx: int, dy: int) -> "CropRect":
		return CropRect(self.width, self.height, self.offset_x + dx, self.offset_y + dy)

#============================================

@dataclass(frozen=True)
class EdgeMargins:
	top: int
	left: int
	bottom: int
	right: int

	#============================
	def as_tuple(self) -> tuple:
		return (self.top, self.left, self.bottom, self.right)

	def __str__(self) -> str:
		return f"{self.top} {self.left} {self.bottom} {self.right}"

#============================================

@dataclass(frozen=True)
class ContentBox:
	"""
	Union of the content detected across all sampled frames.

	Attributes:
		frame: Size of the original frame.
		max_width: Widest detected content.
		max_height: Tallest detected content.
		min_offset_x: Smallest left offset.
		min_offset_y: Smallest top offset.
		inconsistent: True when the union did not fit the frame. The
			bottom and right margins are then clamped to 0.
		samples: Number of frames that contributed a rectangle.
	"""
	frame: FrameSize
	max_width: int
	max_height: int
	min_offset_x: int
	min_offset_y: int
	inconsistent: bool = False
	samples: int = 0

	#============================
	@property
	def bottom(self) -> int:
		return max(0, self.frame.height - (self.min_offset_y + self.max_height))

	#============================
	@property
	def right(self) -> int:
		return max(0, self.frame.width - (self.min_offset_x + self.max_width))

	#============================
	@property
	def margins(self) -> EdgeMargins:
		return EdgeMargins(top=self.min_offset_y, left=self.min_offset_x,
			bottom=self.bottom, right=self.right)

	#============================
	@property
	def size_text(self) -> str:
		return f"{self.max_width}x{self.max_height}"

#============================================

def crop_from_margins(frame: FrameSize, margins: EdgeMargins) -> CropRect:
	"""
	Turn an autocrop margin report into the rectangle it leaves behind.
	"""
	width = frame.width - margins.left - margins.right
	height = frame.height - margins.top - margins.bottom
	return CropRect(width=width, height=height, offset_x=margins.left,
		offset_y=margins.top)
