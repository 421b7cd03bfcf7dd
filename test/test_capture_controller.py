import io

import numpy as np
import pytest
from PIL import Image

from artlens.app.core.error_handler import AnalysisRequestError, CaptureDeviceError
from artlens.domains.analysis.types import (
    ArtistInfo,
    ArtworkAnalysisResult,
    ArtworkDetails,
    ColorPalette,
    ImageFile,
    ReplicationGuide,
)
from artlens.domains.analysis.ui.camera import (
    CAPTURED_FILENAME,
    BrowserCameraStream,
    CameraSettings,
    CameraStream,
    frame_to_image_file,
    open_camera,
)
from artlens.domains.analysis.ui.capture_controller import (
    ANALYSIS_FAILED_ALERT,
    CAMERA_ERROR_MESSAGE,
    CaptureUploadController,
    UploadState,
)


class FakeCameraStream(CameraStream):
    def __init__(self, frame=None, fail_read=False):
        self.frame = frame if frame is not None else np.zeros((1080, 1920, 3), dtype=np.uint8)
        self.fail_read = fail_read
        self.running = True
        self.stop_calls = 0
        self.snapshots = []

    def feed(self, data):
        self.snapshots.append(data)

    def read_frame(self):
        if self.fail_read:
            raise CaptureDeviceError("Unable to read a frame from the camera")
        return self.frame

    def stop(self):
        self.stop_calls += 1
        self.running = False

    @property
    def active_tracks(self):
        return 1 if self.running else 0


class FakeAnalysisClient:
    def __init__(self, error=None):
        self.error = error
        self.images = []

    def analyze(self, image):
        self.images.append(image)
        if self.error is not None:
            raise self.error
        return _result(image)


def _result(image):
    return ArtworkAnalysisResult(
        image_url=image.to_data_uri(),
        artist_info=ArtistInfo(name="Unknown Artist", description="", confidence=0.5),
        color_palette=ColorPalette.from_colors(["#FF6B6B"]),
        analysis=ArtworkDetails(),
        replication_guide=ReplicationGuide(),
    )


def _controller(client=None, stream=None, **callbacks):
    stream = stream or FakeCameraStream()
    controller = CaptureUploadController(
        client or FakeAnalysisClient(),
        camera_factory=lambda settings: stream,
        **callbacks,
    )
    return controller, stream


def _png(name="art.png"):
    return ImageFile(filename=name, content_type="image/png", data=b"\x89PNG fake")


def test_submit_file_runs_callbacks_in_order():
    events = []
    controller, _ = _controller(
        on_upload_start=lambda: events.append(("start", controller.is_loading)),
        on_analysis_complete=lambda result: events.append(("done", result.image_url)),
    )

    result = controller.submit_file(_png())

    assert result is not None
    assert events == [("start", True), ("done", "data:image/png;base64,iVBORyBmYWtl")]
    assert controller.is_loading is False
    assert controller.state is UploadState.PREVIEW_SHOWN
    assert controller.preview.filename == "art.png"


def test_failed_upload_shows_generic_alert():
    errors = []
    client = FakeAnalysisClient(error=AnalysisRequestError("boom", status_code=500))
    controller, _ = _controller(client=client, on_error=errors.append)

    assert controller.submit_file(_png()) is None
    assert errors == [ANALYSIS_FAILED_ALERT]
    assert controller.upload_error == ANALYSIS_FAILED_ALERT
    assert controller.is_loading is False


def test_unsupported_type_is_not_submitted():
    client = FakeAnalysisClient()
    controller, _ = _controller(client=client)

    gif = ImageFile(filename="anim.gif", content_type="image/gif", data=b"GIF89a")

    assert controller.submit_file(gif) is None
    assert client.images == []
    assert controller.state is UploadState.IDLE


def test_submission_ignored_while_loading():
    client = FakeAnalysisClient()
    controller, _ = _controller(client=client)
    controller.is_loading = True

    assert controller.submit_file(_png()) is None
    assert client.images == []


def test_new_upload_replaces_preview():
    controller, _ = _controller()
    controller.submit_file(_png("first.png"))
    controller.submit_file(_png("second.png"))
    assert controller.preview.filename == "second.png"


def test_capture_stops_camera_and_uploads_jpeg():
    client = FakeAnalysisClient()
    controller, stream = _controller(client=client)

    assert controller.open_camera() is True
    assert controller.active_tracks == 1

    result = controller.capture()

    assert result is not None
    assert stream.active_tracks == 0
    assert controller.active_tracks == 0
    assert controller.camera_open is False
    sent = client.images[0]
    assert sent.filename == CAPTURED_FILENAME
    assert sent.content_type == "image/jpeg"
    with Image.open(io.BytesIO(sent.data)) as img:
        assert img.format == "JPEG"
        assert img.size == (800, 600)


def test_capture_read_failure_still_stops_camera():
    client = FakeAnalysisClient()
    controller, stream = _controller(client=client, stream=FakeCameraStream(fail_read=True))
    controller.open_camera()

    assert controller.capture() is None
    assert stream.active_tracks == 0
    assert controller.camera_error
    assert client.images == []


def test_capture_upload_failure_still_stops_camera():
    client = FakeAnalysisClient(error=AnalysisRequestError("down"))
    controller, stream = _controller(client=client)
    controller.open_camera()

    assert controller.capture() is None
    assert stream.active_tracks == 0
    assert controller.upload_error == ANALYSIS_FAILED_ALERT


def test_cancel_returns_to_idle():
    controller, stream = _controller()
    controller.submit_file(_png())
    controller.open_camera()

    controller.cancel_camera()

    assert stream.active_tracks == 0
    assert stream.stop_calls == 1
    assert controller.state is UploadState.IDLE
    assert controller.camera_open is False


def test_context_exit_releases_camera():
    stream = FakeCameraStream()
    with CaptureUploadController(FakeAnalysisClient(), camera_factory=lambda s: stream) as controller:
        controller.open_camera()
        assert stream.active_tracks == 1

    assert stream.active_tracks == 0


def test_camera_denied_keeps_upload_available():
    def denied(settings):
        raise CaptureDeviceError()

    client = FakeAnalysisClient()
    controller = CaptureUploadController(client, camera_factory=denied)

    assert controller.open_camera() is False
    assert controller.camera_error == CAMERA_ERROR_MESSAGE
    assert controller.camera_open is False
    assert controller.submit_file(_png()) is not None


def test_open_camera_twice_reuses_stream():
    opened = []

    def factory(settings):
        stream = FakeCameraStream()
        opened.append(stream)
        return stream

    controller = CaptureUploadController(FakeAnalysisClient(), camera_factory=factory)
    controller.open_camera()
    controller.open_camera()

    assert len(opened) == 1
    controller.close()
    assert opened[0].active_tracks == 0


@pytest.mark.parametrize("shape", [(1080, 1920, 3), (480, 640, 3)])
def test_frame_to_image_file_uses_fixed_canvas(shape):
    frame = np.full(shape, 128, dtype=np.uint8)

    image = frame_to_image_file(frame, CameraSettings())

    assert image.filename == "captured-image.jpg"
    assert image.mime_type == "image/jpeg"
    with Image.open(io.BytesIO(image.data)) as img:
        assert img.size == (800, 600)


def _jpeg_snapshot(size=(1920, 1080)):
    buf = io.BytesIO()
    Image.new("RGB", size, (30, 90, 160)).save(buf, format="JPEG")
    return buf.getvalue()


def _recording_factory(opened):
    def factory(settings):
        stream = open_camera(settings)
        opened.append(stream)
        return stream
    return factory


def test_browser_snapshot_is_captured_and_stream_stopped():
    opened = []
    client = FakeAnalysisClient()
    controller = CaptureUploadController(client, camera_factory=_recording_factory(opened))

    assert controller.open_camera() is True
    assert isinstance(opened[0], BrowserCameraStream)
    assert controller.has_snapshot is False

    assert controller.receive_snapshot(_jpeg_snapshot()) is True
    assert controller.has_snapshot is True

    result = controller.capture()

    assert result is not None
    assert opened[0].active_tracks == 0
    assert controller.active_tracks == 0
    assert controller.has_snapshot is False
    sent = client.images[0]
    assert sent.filename == CAPTURED_FILENAME
    with Image.open(io.BytesIO(sent.data)) as img:
        assert img.format == "JPEG"
        assert img.size == (800, 600)


def test_capture_without_snapshot_still_stops_camera():
    opened = []
    client = FakeAnalysisClient()
    controller = CaptureUploadController(client, camera_factory=_recording_factory(opened))
    controller.open_camera()
    controller.receive_snapshot(None)

    assert controller.capture() is None
    assert controller.camera_error
    assert opened[0].active_tracks == 0
    assert client.images == []


def test_undecodable_snapshot_is_capture_error():
    stream = BrowserCameraStream(CameraSettings())
    stream.feed(b"definitely not a jpeg")

    with pytest.raises(CaptureDeviceError):
        stream.read_frame()

    stream.stop()
    stream.stop()
    assert stream.active_tracks == 0
    with pytest.raises(CaptureDeviceError):
        stream.feed(_jpeg_snapshot())


def test_snapshot_ignored_when_camera_closed():
    controller, stream = _controller()

    assert controller.receive_snapshot(_jpeg_snapshot()) is False
    assert stream.snapshots == []
