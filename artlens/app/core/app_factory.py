"""
애플리케이션 초기화 및 설정을 담당하는 팩토리 모듈.

Streamlit 화면 쪽에서 사용할 설정과 분석 엔드포인트 클라이언트를 한 번 구성합니다.
"""
from typing import Optional
import logging

from artlens.app.core.config import Config, ensure_valid_config, load_config
from artlens.app.core.logger import get_logger
from artlens.domains.analysis.ui.analysis_client import ArtworkAnalysisClient
from artlens.domains.analysis.ui.camera import CameraSettings

logger = logging.getLogger(__name__)


class ApplicationContext:
    """애플리케이션 전체 컨텍스트를 관리하는 클래스"""

    def __init__(self, config: Config, analysis_client: ArtworkAnalysisClient):
        self.config = config
        self.analysis_client = analysis_client
        self.camera_settings = CameraSettings.from_config(config.camera)


class ApplicationFactory:
    """애플리케이션을 생성하고 초기화하는 팩토리 클래스"""

    @staticmethod
    def create_application(config_override: Optional[Config] = None) -> ApplicationContext:
        """
        애플리케이션 컨텍스트를 생성하고 초기화합니다.

        Args:
            config_override: 설정 오버라이드 (테스트용)
        """
        logger.info("Creating application context...")

        config = ensure_valid_config(config_override or load_config())
        get_logger().configure(config.log_dir, config.log_to_file, config.log_level)
        logger.info("Configuration loaded and validated")

        client = ArtworkAnalysisClient(config.api_url, timeout=config.client_timeout)
        logger.info(f"Analysis client targets {config.api_url}")

        return ApplicationContext(config, client)


# 전역 애플리케이션 컨텍스트
_app_context: Optional[ApplicationContext] = None


def get_application() -> ApplicationContext:
    """전역 애플리케이션 컨텍스트를 반환합니다."""
    global _app_context
    if _app_context is None:
        _app_context = ApplicationFactory.create_application()
    return _app_context


def reset_application() -> None:
    """애플리케이션 컨텍스트를 리셋합니다 (테스트용)."""
    global _app_context
    _app_context = None
