from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Tuple

from motiontrack.perception.tracking.geometry import xywh_to_xyxy
from motiontrack.perception.tracking.identity import TrackColor
from motiontrack.utils.types import BBox


@dataclass(frozen=True)
class Track:
    track_id: str
    label: Optional[str]
    bbox: BBox  # (x, y, w, h)
    score: float
    age: int
    history: Tuple[BBox, ...]
    first_seen: float
    color: TrackColor

    @property
    def bbox_xyxy(self) -> Tuple[float, float, float, float]:
        return xywh_to_xyxy(self.bbox)

    @property
    def short_id(self) -> str:
        return self.track_id[-6:]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.track_id,
            "class": self.label,
            "bbox": list(self.bbox),
            "score": self.score,
            "age": self.age,
            "history_length": len(self.history),
            "first_seen": self.first_seen,
            "color": self.color.css,
        }


@dataclass(frozen=True)
class TrackState:
    """
    Active tracks after a tick, keyed by id in creation/match order.
    Only ever replaced, never mutated: advance() returns a new state.
    """

    tracks: Dict[str, Track] = field(default_factory=dict)
    frame_index: int = 0

    @classmethod
    def empty(cls) -> "TrackState":
        return cls()

    def __len__(self) -> int:
        return len(self.tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self.tracks.values())

    def __contains__(self, track_id: object) -> bool:
        return track_id in self.tracks

    def get(self, track_id: str) -> Optional[Track]:
        return self.tracks.get(track_id)

    def ids(self) -> Tuple[str, ...]:
        return tuple(self.tracks.keys())
