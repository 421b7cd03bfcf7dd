"""
카메라 스트림과 프레임 → 이미지 파일 변환.

카메라 장치는 브라우저(st.camera_input)가 소유하고, 서버는 브라우저가 보낸
스냅샷 바이트만 받습니다. CameraStream은 컨트롤러가 독점하는 자원이며,
사용이 끝나면 반드시 stop()으로 모든 트랙을 해제해야 합니다.
"""
import io
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import cv2
import numpy as np
from PIL import Image

from artlens.app.core.config import CameraConfig
from artlens.app.core.error_handler import CaptureDeviceError
from artlens.app.core.logger import LogCategory, log_function
from artlens.domains.analysis.types import ImageFile

logger = logging.getLogger(__name__)

CAPTURED_FILENAME = "captured-image.jpg"


@dataclass
class CameraSettings:
    """카메라 요청 조건 (후면 카메라 우선, 1920x1080 희망 해상도)"""
    facing_mode: str = "environment"
    ideal_width: int = 1920
    ideal_height: int = 1080
    capture_width: int = 800
    capture_height: int = 600
    jpeg_quality: int = 80

    @classmethod
    def from_config(cls, camera: CameraConfig) -> "CameraSettings":
        return cls(
            facing_mode=camera.facing_mode,
            ideal_width=camera.ideal_width,
            ideal_height=camera.ideal_height,
            capture_width=camera.capture_width,
            capture_height=camera.capture_height,
            jpeg_quality=camera.jpeg_quality,
        )


class CameraStream(ABC):
    """라이브 카메라 스트림 인터페이스"""

    @abstractmethod
    def feed(self, data: Optional[bytes]) -> None:
        """브라우저가 보낸 최신 스냅샷을 받습니다. None이면 스냅샷이 지워진 상태입니다."""

    @abstractmethod
    def read_frame(self) -> np.ndarray:
        """현재 프레임을 BGR 배열로 반환합니다."""

    @abstractmethod
    def stop(self) -> None:
        """모든 트랙을 정지합니다. 여러 번 호출해도 안전해야 합니다."""

    @property
    @abstractmethod
    def active_tracks(self) -> int:
        """아직 실행 중인 트랙 수"""


class BrowserCameraStream(CameraStream):
    """st.camera_input 스냅샷 기반 카메라 스트림 (비디오 트랙 1개)"""

    def __init__(self, settings: CameraSettings):
        self.settings = settings
        self._snapshot: Optional[bytes] = None
        self._running = True
        logger.info(
            f"Camera opened: facing={settings.facing_mode}, "
            f"ideal={settings.ideal_width}x{settings.ideal_height}"
        )

    @property
    def has_snapshot(self) -> bool:
        return bool(self._snapshot)

    def feed(self, data: Optional[bytes]) -> None:
        if not self._running:
            raise CaptureDeviceError("Camera stream is not running")
        self._snapshot = data or None

    def read_frame(self) -> np.ndarray:
        if not self._running:
            raise CaptureDeviceError("Camera stream is not running")
        if not self._snapshot:
            raise CaptureDeviceError("No photo has been taken yet")

        try:
            frame = cv2.imdecode(np.frombuffer(self._snapshot, np.uint8), cv2.IMREAD_COLOR)
        except cv2.error as e:
            raise CaptureDeviceError("Unable to decode the camera photo", original_exception=e) from e
        if frame is None:
            raise CaptureDeviceError("Unable to decode the camera photo")
        return frame

    def stop(self) -> None:
        if self._running:
            self._running = False
            self._snapshot = None
            logger.info("Camera released")

    @property
    def active_tracks(self) -> int:
        return 1 if self._running else 0


def open_camera(settings: CameraSettings) -> CameraStream:
    """기본 카메라 팩토리"""
    return BrowserCameraStream(settings)


@log_function(LogCategory.IMAGE_PROCESSING, "encode_capture")
def frame_to_image_file(frame: np.ndarray, settings: CameraSettings) -> ImageFile:
    """프레임을 고정 크기 캔버스에 그려 JPEG 파일로 감쌉니다."""
    rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
    canvas = Image.fromarray(rgb).resize(
        (settings.capture_width, settings.capture_height)
    )
    out = io.BytesIO()
    canvas.save(out, format="JPEG", quality=settings.jpeg_quality)
    return ImageFile(filename=CAPTURED_FILENAME, content_type="image/jpeg", data=out.getvalue())
