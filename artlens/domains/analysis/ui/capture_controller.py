"""
이미지 업로드/카메라 촬영 컨트롤러.

파일 선택과 카메라 촬영을 하나의 제출 흐름으로 모으고, 열려 있는 카메라 스트림을
독점 관리합니다. 취소, 촬영 성공, 촬영 실패, 종료 어느 경로에서도 스트림은 정지됩니다.
"""
import logging
from enum import Enum
from typing import Callable, Optional

from artlens.app.core.error_handler import AnalysisRequestError, CaptureDeviceError
from artlens.app.core.logger import LogCategory, log_function, log_step
from artlens.domains.analysis.types import ArtworkAnalysisResult, ImageFile
from artlens.domains.analysis.ui.analysis_client import ArtworkAnalysisClient
from artlens.domains.analysis.ui.camera import (
    CameraSettings,
    CameraStream,
    frame_to_image_file,
    open_camera,
)

logger = logging.getLogger(__name__)

ACCEPTED_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
ANALYSIS_FAILED_ALERT = "Failed to analyze artwork. Please try again."
CAMERA_ERROR_MESSAGE = "Unable to access camera. Please check permissions."


class UploadState(Enum):
    """업로드 흐름 상태"""
    IDLE = "idle"
    PREVIEW_SHOWN = "preview_shown"
    UPLOADING = "uploading"


def _noop(*args, **kwargs) -> None:
    pass


class CaptureUploadController:
    """파일 업로드와 카메라 촬영을 관리하는 컨트롤러"""

    def __init__(
        self,
        client: ArtworkAnalysisClient,
        camera_factory: Callable[[CameraSettings], CameraStream] = open_camera,
        settings: Optional[CameraSettings] = None,
        on_upload_start: Callable[[], None] = _noop,
        on_analysis_complete: Callable[[ArtworkAnalysisResult], None] = _noop,
        on_error: Callable[[str], None] = _noop,
    ):
        self.client = client
        self.camera_factory = camera_factory
        self.settings = settings or CameraSettings()
        self.on_upload_start = on_upload_start
        self.on_analysis_complete = on_analysis_complete
        self.on_error = on_error

        self.state = UploadState.IDLE
        self.is_loading = False
        self.preview: Optional[ImageFile] = None
        self.camera_error: Optional[str] = None
        self.upload_error: Optional[str] = None
        self._camera: Optional[CameraStream] = None
        self._has_snapshot = False

    # ------------------------------------------------------------------
    # 업로드 흐름
    # ------------------------------------------------------------------
    def submit_file(self, image: ImageFile) -> Optional[ArtworkAnalysisResult]:
        """
        선택되거나 촬영된 이미지를 분석 엔드포인트로 제출합니다.

        Returns:
            분석 결과, 실패하거나 제출하지 않은 경우 None
        """
        if self.is_loading:
            logger.warning("Upload already in progress, ignoring new submission")
            return None

        if image.content_type not in ACCEPTED_MIME_TYPES:
            self.upload_error = f"Unsupported file type: {image.content_type}"
            logger.warning(self.upload_error)
            return None

        # 이전 미리보기는 새 업로드로 대체됩니다.
        self.preview = image
        self.upload_error = None
        self.state = UploadState.UPLOADING
        self.is_loading = True
        self.on_upload_start()

        try:
            with log_step(LogCategory.API_CALL, __name__, "submit_file", "upload",
                          context_data={"filename": image.filename, "size": len(image.data)}):
                result = self.client.analyze(image)
        except AnalysisRequestError as e:
            self.upload_error = ANALYSIS_FAILED_ALERT
            self.on_error(ANALYSIS_FAILED_ALERT)
            logger.error(f"Error analyzing artwork: {e}")
            return None
        finally:
            self.is_loading = False
            self.state = UploadState.PREVIEW_SHOWN

        self.on_analysis_complete(result)
        return result

    # ------------------------------------------------------------------
    # 카메라 흐름
    # ------------------------------------------------------------------
    @property
    def camera_open(self) -> bool:
        return self._camera is not None

    @property
    def active_tracks(self) -> int:
        return self._camera.active_tracks if self._camera else 0

    def open_camera(self) -> bool:
        """카메라를 엽니다. 실패하면 인라인 오류만 남기고 업로드 흐름은 계속 사용 가능합니다."""
        if self._camera is not None:
            return True

        self.camera_error = None
        try:
            with log_step(LogCategory.CAMERA, __name__, "open_camera", "open"):
                self._camera = self.camera_factory(self.settings)
        except CaptureDeviceError as e:
            logger.error(f"Error accessing camera: {e}")
            self.camera_error = CAMERA_ERROR_MESSAGE
            return False

        self.state = UploadState.IDLE
        return True

    def receive_snapshot(self, data: Optional[bytes]) -> bool:
        """브라우저 카메라가 보낸 스냅샷을 열린 스트림에 전달합니다."""
        if self._camera is None:
            return False
        self._camera.feed(data)
        self._has_snapshot = bool(data)
        if self._has_snapshot:
            self.camera_error = None
        return self._has_snapshot

    @property
    def has_snapshot(self) -> bool:
        return self._camera is not None and self._has_snapshot

    def capture(self) -> Optional[ArtworkAnalysisResult]:
        """현재 프레임을 촬영해 JPEG로 만들고, 카메라를 정지한 뒤 업로드 흐름으로 넘깁니다."""
        if self._camera is None:
            return None

        try:
            frame = self._camera.read_frame()
            image = frame_to_image_file(frame, self.settings)
        except CaptureDeviceError as e:
            logger.error(f"Error capturing photo: {e}")
            self.camera_error = str(e)
            return None
        finally:
            self.stop_camera()

        return self.submit_file(image)

    @log_function(LogCategory.UI_INTERACTION)
    def cancel_camera(self) -> None:
        """촬영을 취소하고 Idle로 돌아갑니다."""
        self.stop_camera()
        self.camera_error = None
        self.state = UploadState.IDLE

    def stop_camera(self) -> None:
        camera, self._camera = self._camera, None
        self._has_snapshot = False
        if camera is not None:
            camera.stop()
            logger.info("Camera stream stopped")

    # ------------------------------------------------------------------
    # 종료
    # ------------------------------------------------------------------
    def close(self) -> None:
        self.stop_camera()
        self.preview = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
