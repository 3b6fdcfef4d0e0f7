from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional

from motiontrack.perception.tracking.track import Track


@dataclass
class TrackStats:
    total_count: int = 0
    counts_by_class: Dict[str, int] = field(default_factory=dict)
    average_score: float = 0.0
    oldest_track: Optional[Track] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_count": self.total_count,
            "counts_by_class": dict(self.counts_by_class),
            "average_score": self.average_score,
            "oldest_track": self.oldest_track.to_dict() if self.oldest_track is not None else None,
        }


def summarize(tracks: Iterable[Track]) -> TrackStats:
    """Read-only projection over the active tracks (a TrackState or any iterable of Track)."""
    stats = TrackStats()
    total_score = 0.0
    oldest_age = 0

    for track in tracks:
        stats.total_count += 1
        key = track.label if track.label is not None else "unknown"
        stats.counts_by_class[key] = stats.counts_by_class.get(key, 0) + 1
        total_score += track.score
        if track.age > oldest_age:
            oldest_age = track.age
            stats.oldest_track = track

    stats.average_score = total_score / stats.total_count if stats.total_count else 0.0
    return stats
