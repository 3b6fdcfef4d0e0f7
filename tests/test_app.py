import pytest

import motiontrack.app as app
from motiontrack.inputs.video_input import VideoMeta


class StubInput:
    def __init__(self):
        self.meta = VideoMeta(fps=30.0, width=64, height=48, frame_count=10)
        self.stopped = False

    def stop(self):
        self.stopped = True


class ClosedWriter:
    def __init__(self, *args, **kwargs):
        pass

    def isOpened(self):
        return False


def test_open_writer_stops_input_when_writer_fails(monkeypatch, tmp_path):
    monkeypatch.setattr(app.cv2, "VideoWriter", ClosedWriter)
    vin = StubInput()
    with pytest.raises(RuntimeError, match="VideoWriter"):
        app.open_writer(vin, tmp_path / "output.mp4")
    assert vin.stopped
