import json
from pathlib import Path
from typing import Iterable

from motiontrack.perception.tracking.track import TrackState


class TrackEventLogger:
    def __init__(self, run_dir: Path):
        self.log_path = Path(run_dir) / "track_events.jsonl"
        self.log_path.touch(exist_ok=True)
        self.events_written = 0

    def log(self, frame_idx: int, timestamp_s: float, state: TrackState, created: Iterable[str], retired: Iterable[str]):
        """Append one line per created/retired track; frames with no change write nothing."""
        created = list(created)
        retired = list(retired)
        if not created and not retired:
            return
        with open(self.log_path, "a", encoding="utf-8") as f:
            for tid in created:
                track = state.get(tid)
                event = {
                    "frame": frame_idx,
                    "time_s": round(timestamp_s, 3),
                    "event": "created",
                    "track_id": tid,
                    "class": track.label if track else None,
                    "bbox": list(track.bbox) if track else None,
                }
                f.write(json.dumps(event) + "\n")
            for tid in retired:
                event = {
                    "frame": frame_idx,
                    "time_s": round(timestamp_s, 3),
                    "event": "retired",
                    "track_id": tid,
                }
                f.write(json.dumps(event) + "\n")
        self.events_written += len(created) + len(retired)
