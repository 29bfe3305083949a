#!/usr/bin/env python3

"""
Fold per-frame crop rectangles into one content box for the whole video.

The box is the union of every sampled frame's content: widest width,
tallest height, smallest offsets. It is a safe lower bound on the size of
the baked-in bars, never an average.
"""

import collections
import functools
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional

from vidbboxlib.core import utils
from vidbboxlib.core.geometry import ContentBox, CropRect, FrameSize

MIN_CONTENT_WIDTH = 10
TRAILING_DISCOUNT = 2
MIN_RETAINED_SAMPLES = 2

#============================================

@dataclass(frozen=True)
class BoxAccumulator:
	frame: FrameSize
	max_width: int
	max_height: int
	min_offset_x: int
	min_offset_y: int
	count: int = 0

	#============================
	@classmethod
	def empty(cls, frame: FrameSize) -> "BoxAccumulator":
		return cls(frame=frame, max_width=0, max_height=0,
			min_offset_x=frame.width, min_offset_y=frame.height, count=0)

	#============================
	def fold(self, rect: CropRect) -> "BoxAccumulator":
		return BoxAccumulator(
			frame=self.frame,
			max_width=max(self.max_width, rect.width),
			max_height=max(self.max_height, rect.height),
			min_offset_x=min(self.min_offset_x, rect.offset_x),
			min_offset_y=min(self.min_offset_y, rect.offset_y),
			count=self.count + 1,
		)

	#============================
	def merge(self, other: "BoxAccumulator") -> "BoxAccumulator":
		if other.frame != self.frame:
			raise ValueError(f"cannot merge boxes for {self.frame} and {other.frame}")
		return BoxAccumulator(
			frame=self.frame,
			max_width=max(self.max_width, other.max_width),
			max_height=max(self.max_height, other.max_height),
			min_offset_x=min(self.min_offset_x, other.min_offset_x),
			min_offset_y=min(self.min_offset_y, other.min_offset_y),
			count=self.count + other.count,
		)

#============================================

def discount_trailing(samples: Iterable, trailing: int = TRAILING_DISCOUNT) -> Iterator:
	"""
	Yield samples lazily, leaving out the last few.

	Samples are dropped from the end one at a time, at most `trailing` of
	them, and only while more than MIN_RETAINED_SAMPLES remain. One or two
	samples always pass through untouched.

	Args:
		samples: Any iterable, consumed once.
		trailing: Maximum number of trailing samples to drop.

	Yields:
		The retained samples in their original order.
	"""
	if trailing <= 0:
		yield from samples
		return
	lookahead = max(trailing, MIN_RETAINED_SAMPLES)
	buffer = collections.deque()
	yielded = 0
	for sample in samples:
		buffer.append(sample)
		if len(buffer) > lookahead:
			yield buffer.popleft()
			yielded += 1
	total = yielded + len(buffer)
	keep = max(min(total, MIN_RETAINED_SAMPLES), total - trailing)
	for _ in range(keep - yielded):
		yield buffer.popleft()
	return

#============================================

class BoundingBoxAggregator():
	def __init__(self, min_content_width: int = MIN_CONTENT_WIDTH,
		trailing_discount: int = TRAILING_DISCOUNT):
		self.min_content_width = min_content_width
		self.trailing_discount = trailing_discount

	#============================
	def is_plausible(self, rect: Optional[CropRect]) -> bool:
		if rect is None:
			return False
		if rect.height <= 0:
			return False
		return rect.width >= self.min_content_width

	#============================
	def accumulate(self, frame: FrameSize, samples: Iterable) -> BoxAccumulator:
		"""
		Fold a stream of CropRect or None samples into an accumulator.
		"""
		if self.trailing_discount > 0:
			samples = discount_trailing(samples, self.trailing_discount)
		indexed = enumerate(samples, start=1)
		return functools.reduce(self._fold_sample, indexed, BoxAccumulator.empty(frame))

	#============================
	def _fold_sample(self, acc: BoxAccumulator, item: tuple) -> BoxAccumulator:
		(index, rect) = item
		if rect is None:
			utils.log(f"sample {index}: blank", level=2)
			return acc
		if not self.is_plausible(rect):
			utils.log(f"sample {index}: blank ({rect.width}px wide)", level=2)
			return acc
		right = acc.frame.width - (rect.offset_x + rect.width)
		bottom = acc.frame.height - (rect.offset_y + rect.height)
		utils.log(f"sample {index} margin: {rect.offset_y} {right} {bottom} {rect.offset_x}",
			level=2)
		return acc.fold(rect)

	#============================
	def finalize(self, acc: BoxAccumulator) -> Optional[ContentBox]:
		"""
		Turn an accumulator into a ContentBox, or None when nothing was seen.

		A union that does not fit inside the frame is flagged as inconsistent.
		Sizes larger than the frame are clamped to it. The offsets are kept
		as folded, so a negative bottom or right margin reads as 0.
		"""
		if acc.count == 0:
			return None
		frame = acc.frame
		inconsistent = False
		max_width = acc.max_width
		max_height = acc.max_height
		min_x = acc.min_offset_x
		min_y = acc.min_offset_y
		if max_width > frame.width:
			max_width = frame.width
			inconsistent = True
		if max_height > frame.height:
			max_height = frame.height
			inconsistent = True
		if min_x < 0:
			min_x = 0
			inconsistent = True
		if min_y < 0:
			min_y = 0
			inconsistent = True
		if min_x + max_width > frame.width:
			inconsistent = True
		if min_y + max_height > frame.height:
			inconsistent = True
		if inconsistent:
			utils.log(f"content box {acc.max_width}x{acc.max_height}"
				f"+{acc.min_offset_x}+{acc.min_offset_y} exceeds frame {frame}, clamped",
				level=1)
		return ContentBox(frame=frame, max_width=max_width, max_height=max_height,
			min_offset_x=min_x, min_offset_y=min_y, inconsistent=inconsistent,
			samples=acc.count)

	#============================
	def aggregate(self, frame: FrameSize, samples: Iterable) -> Optional[ContentBox]:
		acc = self.accumulate(frame, samples)
		return self.finalize(acc)
