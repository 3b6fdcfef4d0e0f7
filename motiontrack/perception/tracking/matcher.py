from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Sequence, Set, Tuple

import numpy as np
from scipy.optimize import linear_sum_assignment

from motiontrack.perception.tracking.geometry import iou, iou_matrix
from motiontrack.perception.tracking.track import Track
from motiontrack.utils.types import Detection

DEFAULT_IOU_THRESHOLD = 0.3


@dataclass
class MatchResult:
    matches: List[Tuple[int, str]] = field(default_factory=list)  # (detection index, track id)
    unmatched: List[int] = field(default_factory=list)  # detection indices

    def by_detection(self) -> Dict[int, str]:
        return dict(self.matches)


def _same_class(detection: Detection, track: Track) -> bool:
    # A detection without a class never extends anything.
    return detection.label is not None and track.label == detection.label


def match(
    detections: Sequence[Detection],
    previous_tracks: Mapping[str, Track],
    threshold: float = DEFAULT_IOU_THRESHOLD,
) -> MatchResult:
    """
    Greedy, order-dependent assignment.

    Detections are visited in the order given. Each one claims the unclaimed
    previous track of the same class with the highest IoU above `threshold`;
    ties go to the track scanned first. An earlier detection can take a track
    that a later detection overlaps better, and that is kept as is.
    """
    result = MatchResult()
    claimed: Set[str] = set()

    for det_idx, det in enumerate(detections):
        best_id = None
        best_iou = 0.0
        for track_id, track in previous_tracks.items():
            if track_id in claimed or not _same_class(det, track):
                continue
            score = iou(det.bbox, track.bbox)
            if score > threshold and score > best_iou:
                best_id, best_iou = track_id, score

        if best_id is None:
            result.unmatched.append(det_idx)
        else:
            claimed.add(best_id)
            result.matches.append((det_idx, best_id))

    return result


def match_hungarian(
    detections: Sequence[Detection],
    previous_tracks: Mapping[str, Track],
    threshold: float = DEFAULT_IOU_THRESHOLD,
) -> MatchResult:
    """
    Globally optimal assignment (max total IoU) with the same class gating and
    threshold as match(). Opt-in: it can pair boxes differently from the
    greedy matcher when detections compete for one track.
    """
    result = MatchResult()
    track_ids = list(previous_tracks.keys())
    if not detections or not track_ids:
        result.unmatched = list(range(len(detections)))
        return result

    tracks = [previous_tracks[tid] for tid in track_ids]
    scores = iou_matrix([d.bbox for d in detections], [t.bbox for t in tracks])
    gate = np.array([[_same_class(d, t) for t in tracks] for d in detections], dtype=bool)
    # Pairs at or below the threshold must not compete in the assignment.
    scores = np.where(gate & (scores > threshold), scores, 0.0)

    rows, cols = linear_sum_assignment(-scores)
    paired: Dict[int, str] = {}
    for r, c in zip(rows, cols):
        if scores[r, c] > threshold:
            paired[int(r)] = track_ids[int(c)]

    for det_idx in range(len(detections)):
        if det_idx in paired:
            result.matches.append((det_idx, paired[det_idx]))
        else:
            result.unmatched.append(det_idx)
    return result


MATCHERS: Dict[str, Callable[..., MatchResult]] = {
    "greedy": match,
    "hungarian": match_hungarian,
}


def get_matcher(name: str) -> Callable[..., MatchResult]:
    try:
        return MATCHERS[name]
    except KeyError:
        raise ValueError(f"Unknown matching strategy {name!r}; expected one of {sorted(MATCHERS)}") from None
