from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

BBox = Tuple[float, float, float, float]  # (x, y, width, height)


@dataclass
class FramePacket:
    frame: object
    timestamp: float
    source_id: str = "video"


@dataclass(frozen=True)
class Detection:
    bbox: BBox
    score: float
    label: Optional[str]

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Detection":
        """
        Build a Detection from the detection source's wire shape:
          {"bbox": [x, y, w, h], "class": "person", "score": 0.91}
        A missing class is kept as None so the tracker never pairs it.
        """
        bbox = raw.get("bbox")
        if bbox is None or len(bbox) < 4:
            raise ValueError(f"Detection needs a 4-value bbox, got {bbox!r}")
        label = raw.get("class", raw.get("label"))
        return cls(
            bbox=tuple(float(v) for v in bbox[:4]),
            score=float(raw.get("score", 0.0) or 0.0),
            label=str(label) if label is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"bbox": list(self.bbox), "class": self.label, "score": self.score}
