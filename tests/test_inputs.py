import pytest

from motiontrack.inputs.video_input import VideoInput


def test_video_input_configures_path_without_opening():
    vi = VideoInput("/tmp/video.mp4", allow_missing=True)
    assert str(vi.path) == "/tmp/video.mp4"
    assert list(vi.frames()) == []
    assert vi.fps == 30.0


def test_video_input_missing_file_raises():
    with pytest.raises(FileNotFoundError):
        VideoInput("/tmp/definitely_missing_motiontrack.mp4")
