import json

import pytest

from motiontrack.analytics.statistics import summarize
from motiontrack.export.measurements import export_tracks_json, tracks_to_measurements
from motiontrack.perception.tracking.identity import IdentityAllocator
from motiontrack.perception.tracking.lifecycle import advance
from motiontrack.perception.tracking.track import TrackState
from motiontrack.runtime.track_event_logger import TrackEventLogger
from motiontrack.utils.types import Detection


def two_frame_state():
    alloc = IdentityAllocator(seed=0, session="s1")
    clock = iter([1000.0, 1001.0]).__next__
    s1 = advance(TrackState.empty(), [Detection((0, 0, 50, 50), 0.9, "scissors")], alloc, clock=clock)
    s2 = advance(s1, [Detection((1, 1, 50, 50), 0.87, "scissors")], alloc, clock=clock)
    return s1, s2


def test_tracks_to_measurements():
    _, state = two_frame_state()
    (m,) = tracks_to_measurements(state, current_time_s=12.0, fps=30.0, now=1002.0)
    assert m["id"] == "obj_s1_000001"
    assert m["element_name"] == "scissors - 000001"
    assert m["start_time"] == pytest.approx(10.0)
    assert m["duration"] == pytest.approx(2 / 30)
    assert m["description"] == "Detected scissors with 87% confidence"
    assert m["therblig"] == "Transport"
    assert m["color"].startswith("hsl(")


def test_export_tracks_json(tmp_path):
    _, state = two_frame_state()
    path = export_tracks_json(tmp_path / "out" / "tracks.json", state, summarize(state), video_src="bench.mp4")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["video_src"] == "bench.mp4"
    assert data["tracks"][0]["history_length"] == 2
    assert data["stats"]["total_count"] == 1


def test_event_logger_writes_only_changes(tmp_path):
    s1, s2 = two_frame_state()
    logger = TrackEventLogger(tmp_path)
    logger.log(1, 0.033, s1, created=s1.ids(), retired=[])
    logger.log(2, 0.066, s2, created=[], retired=[])
    logger.log(3, 0.1, TrackState.empty(), created=[], retired=s2.ids())
    lines = [json.loads(l) for l in logger.log_path.read_text(encoding="utf-8").splitlines()]
    assert [e["event"] for e in lines] == ["created", "retired"]
    assert lines[0]["class"] == "scissors"
    assert logger.events_written == 2
