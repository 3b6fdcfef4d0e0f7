from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Protocol

from motiontrack.utils.logger import get_logger
from motiontrack.utils.types import Detection


class DetectionSource(Protocol):
    def detect(self, frame: Any) -> List[Detection]:
        ...


class DetectorInitError(RuntimeError):
    """The detection model could not be loaded; the session cannot track."""


def yolo_factory(cfg: Dict[str, Any]) -> Callable[[], DetectionSource]:
    def build() -> DetectionSource:
        from motiontrack.perception.detection.yolo import YOLODetector

        return YOLODetector(
            model_name=cfg.get("model", "yolov8n.pt"),
            device=cfg.get("device"),
            conf_thres=float(cfg.get("conf_thres", 0.25)),
            allowed_classes=cfg.get("allowed_classes"),
        )

    return build


class DetectorResource:
    """
    Owns the detection model for one session.

    acquire() loads it once and hands back the same instance on later calls;
    release() tears it down. Usable as a context manager.
    """

    def __init__(self, factory: Callable[[], DetectionSource]):
        self._factory = factory
        self._detector: Optional[DetectionSource] = None
        self.logger = get_logger(__name__)

    @property
    def acquired(self) -> bool:
        return self._detector is not None

    def acquire(self) -> DetectionSource:
        if self._detector is not None:
            return self._detector
        try:
            self._detector = self._factory()
        except Exception as e:
            raise DetectorInitError(f"Failed to initialize detector: {e}") from e
        self.logger.info("Detector initialized: %s", type(self._detector).__name__)
        return self._detector

    def release(self) -> None:
        if self._detector is None:
            return
        detector, close = self._detector, getattr(self._detector, "close", None)
        try:
            if callable(close):
                close()
        finally:
            self._detector = None
            self.logger.info("Detector released: %s", type(detector).__name__)

    def __enter__(self) -> DetectionSource:
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
