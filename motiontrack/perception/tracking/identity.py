from __future__ import annotations

import colorsys
import itertools
import uuid
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True)
class TrackColor:
    hue: int
    saturation: int = 70  # percent
    lightness: int = 60  # percent

    @property
    def css(self) -> str:
        return f"hsl({self.hue}, {self.saturation}%, {self.lightness}%)"

    @property
    def bgr(self) -> Tuple[int, int, int]:
        r, g, b = colorsys.hls_to_rgb(self.hue / 360.0, self.lightness / 100.0, self.saturation / 100.0)
        return int(round(b * 255)), int(round(g * 255)), int(round(r * 255))


class IdentityAllocator:
    """
    Hands out track ids and display colours.

    Ids are "{prefix}_{session}_{n:06d}": a monotonic counter qualified by a
    per-allocator session token, so two allocators never collide and one
    allocator never repeats. Colours come from a seedable numpy Generator.
    """

    def __init__(self, seed: Optional[int] = None, prefix: str = "obj", session: Optional[str] = None):
        self.prefix = prefix
        self.session = session or uuid.uuid4().hex[:8]
        self._counter = itertools.count(1)
        self._rng = np.random.default_rng(seed)

    def new_id(self) -> str:
        return f"{self.prefix}_{self.session}_{next(self._counter):06d}"

    def new_color(self) -> TrackColor:
        return TrackColor(hue=int(self._rng.integers(0, 360)))
