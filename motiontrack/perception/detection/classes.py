from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from motiontrack.utils.types import Detection

# Objects that usually matter on a workbench or shop floor.
DEFAULT_RELEVANT_CLASSES = (
    "person",
    "bottle",
    "cup",
    "bowl",
    "scissors",
    "cell phone",
    "laptop",
    "mouse",
    "keyboard",
    "book",
    "clock",
    "vase",
    "spoon",
    "fork",
    "knife",
    "chair",
    "dining table",
    "potted plant",
    "backpack",
    "handbag",
    "tie",
    "suitcase",
)

COCO_CLASSES = (
    "person", "bicycle", "car", "motorcycle", "airplane", "bus", "train", "truck", "boat",
    "traffic light", "fire hydrant", "stop sign", "parking meter", "bench", "bird", "cat",
    "dog", "horse", "sheep", "cow", "elephant", "bear", "zebra", "giraffe", "backpack",
    "umbrella", "handbag", "tie", "suitcase", "frisbee", "skis", "snowboard", "sports ball",
    "kite", "baseball bat", "baseball glove", "skateboard", "surfboard", "tennis racket",
    "bottle", "wine glass", "cup", "fork", "knife", "spoon", "bowl", "banana", "apple",
    "sandwich", "orange", "broccoli", "carrot", "hot dog", "pizza", "donut", "cake", "chair",
    "couch", "potted plant", "bed", "dining table", "toilet", "tv", "laptop", "mouse",
    "remote", "keyboard", "cell phone", "microwave", "oven", "toaster", "sink", "refrigerator",
    "book", "clock", "vase", "scissors", "teddy bear", "hair drier", "toothbrush",
)


def detectable_classes() -> List[str]:
    return list(COCO_CLASSES)


def filter_relevant(detections: Iterable[Detection], relevant_classes: Optional[Sequence[str]] = None) -> List[Detection]:
    """Keep detections whose class (case-insensitive) is in the list; unlabeled ones are dropped."""
    wanted = {c.lower() for c in (relevant_classes or DEFAULT_RELEVANT_CLASSES)}
    return [d for d in detections if d.label is not None and d.label.lower() in wanted]


def filter_classes(detections: Iterable[Detection], classes: Optional[Sequence[str]]) -> List[Detection]:
    """Exact-match class filter; an empty selection keeps everything."""
    detections = list(detections)
    if not classes:
        return detections
    selected = set(classes)
    return [d for d in detections if d.label in selected]
