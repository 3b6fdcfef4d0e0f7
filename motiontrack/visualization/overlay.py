from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import cv2
import numpy as np

from motiontrack.perception.tracking.geometry import box_center
from motiontrack.perception.tracking.track import Track

FALLBACK_COLOR = (0, 255, 0)


def draw_tracks(
    frame: Any,
    tracks: Iterable[Track],
    scale_x: float = 1.0,
    scale_y: float = 1.0,
    show_trails: bool = False,
) -> Any:
    """
    Box, "{class} ({score}%)" label and short id per track; with show_trails,
    a polyline through the centers of the track's history.
    """
    render = frame.copy()

    for tr in tracks:
        color = tr.color.bgr if tr.color is not None else FALLBACK_COLOR
        x1, y1, x2, y2 = tr.bbox_xyxy
        p1 = (int(x1 * scale_x), int(y1 * scale_y))
        p2 = (int(x2 * scale_x), int(y2 * scale_y))
        cv2.rectangle(render, p1, p2, color, 3)

        label = f"{tr.label} ({round(tr.score * 100)}%)"
        (tw, th), _ = cv2.getTextSize(label, cv2.FONT_HERSHEY_SIMPLEX, 0.5, 1)
        top = max(0, p1[1] - th - 10)
        cv2.rectangle(render, (p1[0], top), (p1[0] + tw + 10, top + th + 8), color, -1)
        cv2.putText(render, label, (p1[0] + 5, top + th + 3), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 0, 0), 1, cv2.LINE_AA)

        cv2.putText(render, f"ID: {tr.short_id}", (p1[0] + 5, p2[1] + 15), cv2.FONT_HERSHEY_SIMPLEX, 0.4, color, 1, cv2.LINE_AA)

        if show_trails and len(tr.history) > 1:
            pts = np.array(
                [[cx * scale_x, cy * scale_y] for cx, cy in (box_center(b) for b in tr.history)],
                dtype=np.int32,
            ).reshape(-1, 1, 2)
            trail = render.copy()
            cv2.polylines(trail, [pts], False, color, 2)
            render = cv2.addWeighted(trail, 0.5, render, 0.5, 0)

    return render


def draw_hud(frame: Any, fps: float, counts_by_class: Dict[str, int], warnings: Optional[List[str]] = None) -> Any:
    """FPS, active count and a per-class breakdown in the top-left corner."""
    render = frame.copy()
    y = 25
    total = sum(counts_by_class.values())
    cv2.putText(render, f"FPS: {fps:5.1f} | tracks: {total}", (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2)
    y += 26

    for name, count in sorted(counts_by_class.items(), key=lambda kv: -kv[1])[:6]:
        cv2.putText(render, f"{name}: {count}", (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.55, (220, 220, 220), 1)
        y += 20

    if warnings:
        y += 8
        for w in [w for w in warnings if w.startswith("WARNING")][:3]:
            cv2.putText(render, w, (15, y), cv2.FONT_HERSHEY_SIMPLEX, 0.6, (0, 0, 255), 2)
            y += 24

    return render
