from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import numpy as np
import torch
from ultralytics import YOLO

from motiontrack.utils.types import Detection


def pick_device(device: Optional[str] = None) -> str:
    if device:
        return device
    if torch.cuda.is_available():
        return "cuda"
    if torch.backends.mps.is_available():
        return "mps"
    return "cpu"


class YOLODetector:
    """
    YOLOv8 wrapper emitting motiontrack Detections.
    Boxes come out as (x, y, width, height) in frame pixels.
    """

    def __init__(
        self,
        model_name: str = "yolov8n.pt",
        device: Optional[str] = None,
        conf_thres: float = 0.25,
        allowed_classes: Optional[Sequence[str]] = None,
    ):
        self.device = pick_device(device)
        self.model = YOLO(model_name)
        self.model.to(self.device)
        self.conf_thres = float(conf_thres)
        self.allowed_classes = set(allowed_classes) if allowed_classes else None

        names = getattr(self.model, "names", {}) or {}
        if isinstance(names, list):
            names = {i: n for i, n in enumerate(names)}
        self.names: Dict[int, str] = names

    def detect(self, frame: np.ndarray) -> List[Detection]:
        """Run YOLO inference on a single BGR frame."""
        results = self.model(
            frame,
            device=self.device,
            conf=self.conf_thres,
            verbose=False,
        )[0]

        detections: List[Detection] = []

        if results.boxes is None:
            return detections

        for box in results.boxes:
            cls_id = int(box.cls.item())
            label = str(self.names.get(cls_id, cls_id))
            if self.allowed_classes is not None and label not in self.allowed_classes:
                continue

            x1, y1, x2, y2 = (float(v) for v in box.xyxy[0].tolist())
            detections.append(
                Detection(
                    bbox=(x1, y1, x2 - x1, y2 - y1),
                    score=float(box.conf.item()),
                    label=label,
                )
            )

        return detections

    def close(self) -> None:
        self.model = None
        if self.device == "cuda":
            torch.cuda.empty_cache()
