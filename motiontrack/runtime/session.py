from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from motiontrack.analytics.statistics import TrackStats, summarize
from motiontrack.perception.detection.classes import filter_classes, filter_relevant
from motiontrack.perception.detection.resource import DetectionSource, DetectorInitError, DetectorResource, yolo_factory
from motiontrack.perception.tracking.lifecycle import IoUTracker, TrackerConfig, created_ids, retired_ids
from motiontrack.perception.tracking.track import TrackState
from motiontrack.utils.config import get
from motiontrack.utils.logger import get_logger
from motiontrack.utils.timing import FPSMeter, StageTimer
from motiontrack.utils.types import Detection


class SessionStatus(str, Enum):
    INITIALIZING = "INITIALIZING"
    READY = "READY"
    FAILED = "FAILED"  # detector never came up; shown as "not ready"


@dataclass
class RuntimeStats:
    fps: float = 0.0
    stages_ms: Dict[str, float] = field(default_factory=dict)


@dataclass
class TickResult:
    """Everything one tick produced. `state` becomes the next tick's input."""

    frame_id: int
    detections: List[Detection]
    state: TrackState
    stats: TrackStats
    frame: Any = field(default=None, repr=False)
    created: List[str] = field(default_factory=list)
    retired: List[str] = field(default_factory=list)
    detection_failed: bool = False
    warnings: List[str] = field(default_factory=list)
    runtime: RuntimeStats = field(default_factory=RuntimeStats)

    def summary(self) -> str:
        return (
            f"frame={self.frame_id} "
            f"detections={len(self.detections)} "
            f"tracks={self.stats.total_count} "
            f"created={len(self.created)} "
            f"retired={len(self.retired)} "
            f"fps={self.runtime.fps:.1f}"
        )


class TrackingSession:
    """
    Drives detect -> filter -> advance -> summarize once per frame.

    The session holds the current TrackState between ticks and replaces it
    only in _apply(). A detection that returns after stop() is dropped
    without touching the state.
    """

    def __init__(
        self,
        cfg: Dict[str, Any],
        logger=None,
        resource: Optional[DetectorResource] = None,
        tracker: Optional[IoUTracker] = None,
        frame_rate: Optional[float] = None,
    ):
        self.cfg = cfg
        self.logger = logger or get_logger(__name__)
        if resource is None:
            resource = DetectorResource(yolo_factory(cfg.get("detector", {})))
        self.resource = resource

        # With a frame rate, first_seen is video time (frame_id / frame_rate) instead of wall clock.
        self.frame_rate = float(frame_rate) if frame_rate else None
        self._video_time_s = 0.0
        if tracker is None:
            tracker_cfg = TrackerConfig.from_dict(cfg.get("tracking", {}))
            tracker = IoUTracker(tracker_cfg, clock=self._clock) if self.frame_rate else IoUTracker(tracker_cfg)
        self.tracker = tracker
        self.fps_meter = FPSMeter(smoothing=float(get(cfg, "performance.fps_smoothing", 0.9)))

        self.filter_classes: List[str] = list(get(cfg, "filter.classes", []) or [])
        self.use_relevant_defaults = bool(get(cfg, "filter.use_relevant_defaults", False))

        self.status = SessionStatus.INITIALIZING
        self.state = TrackState.empty()
        self._detector: Optional[DetectionSource] = None
        self._running = False
        self.detection_failures = 0

    # Lifecycle

    def start(self) -> None:
        if self.status == SessionStatus.READY:
            return
        if self.status == SessionStatus.FAILED:
            raise RuntimeError("Detector failed to initialize; create a new session to retry")
        try:
            self._detector = self.resource.acquire()
        except DetectorInitError as e:
            self.status = SessionStatus.FAILED
            self.logger.error("Tracking session not ready: %s", e)
            raise
        self.status = SessionStatus.READY
        self.logger.info("Tracking session ready (matching=%s, iou>%.2f)", self.tracker.cfg.matching, self.tracker.cfg.iou_threshold)

    def stop(self) -> None:
        self._running = False

    def reset(self) -> None:
        self.state = TrackState.empty()
        self._video_time_s = 0.0
        self.fps_meter.reset()
        self.detection_failures = 0

    def close(self) -> None:
        self.stop()
        self.resource.release()
        self._detector = None
        self.status = SessionStatus.INITIALIZING

    def __enter__(self) -> "TrackingSession":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def running(self) -> bool:
        return self._running

    # Ticks

    def step(self, frame_id: int, frame: Any) -> TickResult:
        """Run a single tick outside of run()."""
        self._require_ready()
        timer = StageTimer()
        detections, failed = self._detect(frame, timer)
        return self._apply(frame_id, frame, detections, failed, timer)

    def run(self, frames: Iterable[Tuple[int, Any]]) -> Iterator[TickResult]:
        """
        Tick once per (frame_id, frame) until the frames run out or stop()
        is called. The running flag is checked before every tick and again
        once detection returns.
        """
        self._require_ready()
        self._running = True
        try:
            for frame_id, frame in frames:
                if not self._running:
                    break
                timer = StageTimer()
                detections, failed = self._detect(frame, timer)
                if not self._running:
                    self.logger.debug("Discarding detections for frame %d after stop()", frame_id)
                    break
                yield self._apply(frame_id, frame, detections, failed, timer)
        finally:
            self._running = False

    def _require_ready(self) -> None:
        if self.status != SessionStatus.READY or self._detector is None:
            raise RuntimeError(f"Tracking session is not ready (status={self.status.value})")

    def _detect(self, frame: Any, timer: StageTimer) -> Tuple[List[Detection], bool]:
        t0 = time.perf_counter()
        try:
            detections = list(self._detector.detect(frame))
            failed = False
        except Exception as e:
            # A failed frame counts as an empty frame; every active track retires.
            self.logger.warning("Detection failed, treating frame as empty: %s", e)
            self.detection_failures += 1
            detections, failed = [], True
        timer.mark("detection", t0)

        t1 = time.perf_counter()
        detections = self._normalize(detections)
        if self.use_relevant_defaults:
            detections = filter_relevant(detections)
        detections = filter_classes(detections, self.filter_classes)
        timer.mark("filter", t1)
        return detections, failed

    def _normalize(self, raw_detections: List[Any]) -> List[Detection]:
        """Accept Detection objects or {bbox, class, score} records; drop records without a usable bbox."""
        out: List[Detection] = []
        for raw in raw_detections:
            if isinstance(raw, Detection):
                out.append(raw)
                continue
            try:
                out.append(Detection.from_dict(raw))
            except (ValueError, TypeError, AttributeError) as e:
                self.logger.warning("Skipping malformed detection %r: %s", raw, e)
        return out

    def _clock(self) -> float:
        return self._video_time_s

    def _apply(self, frame_id: int, frame: Any, detections: List[Detection], failed: bool, timer: StageTimer) -> TickResult:
        t0 = time.perf_counter()
        if self.frame_rate:
            self._video_time_s = frame_id / self.frame_rate
        previous = self.state
        self.state = self.tracker.update(previous, detections)
        timer.mark("tracking", t0)

        t1 = time.perf_counter()
        stats = summarize(self.state)
        timer.mark("stats", t1)

        fps = self.fps_meter.tick()
        warnings: List[str] = []
        if failed:
            warnings.append("WARNING: detection failed, all tracks retired")
        warnings.append(f"INFO: {len(detections)} detections | {len(self.state)} tracks")

        result = TickResult(
            frame_id=frame_id,
            frame=frame,
            detections=detections,
            state=self.state,
            stats=stats,
            created=created_ids(previous, self.state),
            retired=retired_ids(previous, self.state),
            detection_failed=failed,
            warnings=warnings,
            runtime=RuntimeStats(fps=fps, stages_ms=dict(timer.stages_ms)),
        )
        if frame_id % 30 == 0:
            self.logger.info("[TRACK] %s", result.summary())
        return result
