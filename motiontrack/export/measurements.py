from __future__ import annotations

import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from motiontrack.analytics.statistics import TrackStats
from motiontrack.perception.tracking.track import Track


def tracks_to_measurements(
    tracks: Iterable[Track],
    current_time_s: float,
    fps: float = 30.0,
    now: Optional[float] = None,
    category: str = "Value-added",
    therblig: str = "Transport",
) -> List[Dict[str, Any]]:
    """
    Turn active tracks into time-study elements.

    current_time_s is the video position at export time; each element starts
    at that position shifted back by how long ago the track was first seen,
    measured on the same clock as first_seen and `now`. It lasts len(history) / fps seconds.
    """
    now = time.time() if now is None else now
    fps = fps if fps > 0 else 30.0
    out: List[Dict[str, Any]] = []
    for track in tracks:
        label = track.label or "unknown"
        out.append(
            {
                "id": track.track_id,
                "element_name": f"{label} - {track.short_id}",
                "start_time": (track.first_seen - now) + current_time_s,
                "duration": len(track.history) / fps,
                "category": category,
                "description": f"Detected {label} with {round(track.score * 100)}% confidence",
                "therblig": therblig,
                "color": track.color.css,
            }
        )
    return out


def tracks_payload(tracks: Iterable[Track], stats: Optional[TrackStats] = None, video_src: Optional[str] = None) -> Dict[str, Any]:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "video_src": video_src,
        "tracks": [
            {
                "id": t.track_id,
                "class": t.label,
                "score": t.score,
                "age": t.age,
                "history_length": len(t.history),
                "first_seen": t.first_seen,
            }
            for t in tracks
        ],
        "stats": stats.to_dict() if stats is not None else None,
    }


def export_tracks_json(
    path: str | Path,
    tracks: Iterable[Track],
    stats: Optional[TrackStats] = None,
    video_src: Optional[str] = None,
) -> Path:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(tracks_payload(tracks, stats, video_src), indent=2), encoding="utf-8")
    return out_path
