from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from motiontrack.perception.tracking.identity import IdentityAllocator
from motiontrack.perception.tracking.matcher import DEFAULT_IOU_THRESHOLD, get_matcher
from motiontrack.perception.tracking.track import Track, TrackState
from motiontrack.utils.types import Detection


def advance(
    state: TrackState,
    detections: Sequence[Detection],
    allocator: IdentityAllocator,
    threshold: float = DEFAULT_IOU_THRESHOLD,
    matching: str = "greedy",
    clock: Callable[[], float] = time.time,
) -> TrackState:
    """
    One tick of the track lifecycle.

    Matched detections extend their track (age + 1, bbox appended to history,
    id/colour/first_seen kept). Unmatched detections open new tracks. Any
    previous track not matched here is dropped: the returned state holds only
    what this frame confirmed or created, in detection order.
    """
    result = get_matcher(matching)(detections, state.tracks, threshold)
    paired = result.by_detection()

    tracks: Dict[str, Track] = {}
    for det_idx, det in enumerate(detections):
        track_id = paired.get(det_idx)
        if track_id is not None:
            prev = state.tracks[track_id]
            tracks[track_id] = Track(
                track_id=prev.track_id,
                label=det.label,
                bbox=det.bbox,
                score=det.score,
                age=prev.age + 1,
                history=prev.history + (det.bbox,),
                first_seen=prev.first_seen,
                color=prev.color,
            )
        else:
            new_id = allocator.new_id()
            tracks[new_id] = Track(
                track_id=new_id,
                label=det.label,
                bbox=det.bbox,
                score=det.score,
                age=1,
                history=(det.bbox,),
                first_seen=clock(),
                color=allocator.new_color(),
            )

    return TrackState(tracks=tracks, frame_index=state.frame_index + 1)


def retired_ids(previous: TrackState, current: TrackState) -> List[str]:
    """Ids that were active in `previous` and are gone in `current`."""
    return [tid for tid in previous.tracks if tid not in current.tracks]


def created_ids(previous: TrackState, current: TrackState) -> List[str]:
    return [tid for tid in current.tracks if tid not in previous.tracks]


@dataclass
class TrackerConfig:
    iou_threshold: float = DEFAULT_IOU_THRESHOLD
    matching: str = "greedy"  # "hungarian" switches to optimal assignment
    seed: Optional[int] = None
    id_prefix: str = "obj"

    @classmethod
    def from_dict(cls, cfg: Dict) -> "TrackerConfig":
        return cls(
            iou_threshold=float(cfg.get("iou_threshold", DEFAULT_IOU_THRESHOLD)),
            matching=str(cfg.get("matching", "greedy")),
            seed=cfg.get("seed"),
            id_prefix=str(cfg.get("id_prefix", "obj")),
        )


@dataclass
class IoUTracker:
    """
    IoU tracker with no miss tolerance.
    Owns only the allocator; the track state is passed in and returned.
    """

    cfg: TrackerConfig = field(default_factory=TrackerConfig)
    allocator: Optional[IdentityAllocator] = None
    clock: Callable[[], float] = time.time

    def __post_init__(self):
        get_matcher(self.cfg.matching)
        if self.allocator is None:
            self.allocator = IdentityAllocator(seed=self.cfg.seed, prefix=self.cfg.id_prefix)

    def update(self, state: TrackState, detections: Sequence[Detection]) -> TrackState:
        return advance(
            state,
            detections,
            self.allocator,
            threshold=self.cfg.iou_threshold,
            matching=self.cfg.matching,
            clock=self.clock,
        )
