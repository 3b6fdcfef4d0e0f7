from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np


def xywh_to_xyxy(box: Sequence[float]) -> Tuple[float, float, float, float]:
    x, y, w, h = box[:4]
    return float(x), float(y), float(x + w), float(y + h)


def box_center(box: Sequence[float]) -> Tuple[float, float]:
    x, y, w, h = box[:4]
    return float(x + w / 2.0), float(y + h / 2.0)


def iou(box_a: Sequence[float], box_b: Sequence[float]) -> float:
    """
    Intersection-over-union of two (x, y, w, h) boxes.
    Boxes that do not overlap, or that have no positive union, score 0.
    """
    ax1, ay1, ax2, ay2 = xywh_to_xyxy(box_a)
    bx1, by1, bx2, by2 = xywh_to_xyxy(box_b)

    inter_w = min(ax2, bx2) - max(ax1, bx1)
    inter_h = min(ay2, by2) - max(ay1, by1)
    if inter_w <= 0 or inter_h <= 0:
        return 0.0

    inter = inter_w * inter_h
    union = (box_a[2] * box_a[3]) + (box_b[2] * box_b[3]) - inter
    if union <= 0:
        return 0.0
    return float(min(1.0, inter / union))


def iou_matrix(boxes_a: Sequence[Sequence[float]], boxes_b: Sequence[Sequence[float]]) -> np.ndarray:
    """Pairwise IoU, shape (len(boxes_a), len(boxes_b))."""
    if len(boxes_a) == 0 or len(boxes_b) == 0:
        return np.zeros((len(boxes_a), len(boxes_b)), dtype=np.float64)

    a = np.asarray(boxes_a, dtype=np.float64)[:, :4]
    b = np.asarray(boxes_b, dtype=np.float64)[:, :4]
    ax1, ay1 = a[:, 0:1], a[:, 1:2]
    ax2, ay2 = ax1 + a[:, 2:3], ay1 + a[:, 3:4]
    bx1, by1 = b[:, 0], b[:, 1]
    bx2, by2 = bx1 + b[:, 2], by1 + b[:, 3]

    inter_w = np.minimum(ax2, bx2) - np.maximum(ax1, bx1)
    inter_h = np.minimum(ay2, by2) - np.maximum(ay1, by1)
    overlap = (inter_w > 0) & (inter_h > 0)
    inter = np.where(overlap, inter_w * inter_h, 0.0)

    union = (a[:, 2:3] * a[:, 3:4]) + (b[:, 2] * b[:, 3]) - inter
    with np.errstate(divide="ignore", invalid="ignore"):
        out = np.where(overlap & (union > 0), inter / union, 0.0)
    return np.clip(out, 0.0, 1.0)
