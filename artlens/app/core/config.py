"""
애플리케이션의 설정을 정의하는 모듈입니다.

Config 데이터 클래스를 통해 타입 안전하고 확장 가능한 설정을 제공합니다.
환경 변수(.env 포함)에서 값을 읽어 기본값을 덮어씁니다.
"""
from dataclasses import dataclass, field
from typing import List, Optional
import os

from dotenv import load_dotenv


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    return int(value) if value else default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    value = os.environ.get(name)
    return float(value) if value else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ['true', '1', 'yes']


@dataclass
class OpenAIConfig:
    """
    OpenAI Vision API 호출 관련 설정을 포함하는 데이터 클래스입니다.
    """
    api_key: Optional[str] = None
    model: str = "gpt-4o"
    max_tokens: int = 2000  # 비용/지연 제어용 상한
    timeout: Optional[float] = None  # None이면 전송 계층 기본값 사용


@dataclass
class CameraConfig:
    """
    카메라 촬영 관련 설정을 포함하는 데이터 클래스입니다.
    """
    facing_mode: str = "environment"  # 후면 카메라 우선
    ideal_width: int = 1920
    ideal_height: int = 1080
    capture_width: int = 800
    capture_height: int = 600
    jpeg_quality: int = 80


@dataclass
class Config:
    """
    애플리케이션의 모든 설정을 포함하는 데이터 클래스입니다.
    """
    page_title: str = "Artwork Analyzer"
    page_icon: str = "🎨"

    # API 서버 설정
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_url: str = "http://127.0.0.1:8000/api/analyze-artwork"
    client_timeout: float = 120.0
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    allowed_mime_types: List[str] = field(
        default_factory=lambda: ["image/jpeg", "image/png", "image/webp"]
    )

    # 로깅 설정
    log_dir: str = field(default_factory=lambda: os.path.join(os.getcwd(), "logs"))
    log_to_file: bool = True
    log_level: str = "INFO"

    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)


def load_config() -> Config:
    """
    애플리케이션 설정을 로드하고 Config 인스턴스를 반환합니다.
    .env 파일이 있으면 먼저 읽되, 이미 설정된 환경 변수는 덮어쓰지 않습니다.
    """
    load_dotenv(override=False)

    config = Config()
    config.api_host = os.environ.get("ARTLENS_API_HOST", config.api_host)
    config.api_port = _env_int("ARTLENS_API_PORT", config.api_port)
    config.api_url = os.environ.get(
        "ARTLENS_API_URL",
        f"http://{config.api_host}:{config.api_port}/api/analyze-artwork"
    )
    config.client_timeout = _env_float("ARTLENS_CLIENT_TIMEOUT", config.client_timeout)

    origins = os.environ.get("ARTLENS_CORS_ORIGINS")
    if origins:
        config.cors_origins = [origin.strip() for origin in origins.split(",") if origin.strip()]

    config.log_dir = os.environ.get("ARTLENS_LOG_DIR", config.log_dir)
    config.log_to_file = _env_bool("ARTLENS_LOG_TO_FILE", config.log_to_file)
    config.log_level = os.environ.get("ARTLENS_LOG_LEVEL", config.log_level).upper()

    config.openai.api_key = os.environ.get("OPENAI_API_KEY")
    config.openai.model = os.environ.get("ARTLENS_MODEL", config.openai.model)
    config.openai.max_tokens = _env_int("ARTLENS_MAX_TOKENS", config.openai.max_tokens)
    config.openai.timeout = _env_float("ARTLENS_OPENAI_TIMEOUT", config.openai.timeout)

    return config


def ensure_valid_config(config: Config) -> Config:
    """설정값을 검증하고, 잘못된 값이 있으면 ConfigurationError를 발생시킵니다."""
    from artlens.app.core.error_handler import ConfigurationError

    if config.openai.max_tokens <= 0:
        raise ConfigurationError(
            f"max_tokens는 양수여야 합니다: {config.openai.max_tokens}",
            suggestion="ARTLENS_MAX_TOKENS 값을 확인해주세요."
        )
    if not 0 < config.api_port < 65536:
        raise ConfigurationError(
            f"잘못된 포트 번호입니다: {config.api_port}",
            suggestion="ARTLENS_API_PORT 값을 확인해주세요."
        )
    if not 1 <= config.camera.jpeg_quality <= 95:
        raise ConfigurationError(f"JPEG 품질은 1-95 범위여야 합니다: {config.camera.jpeg_quality}")
    return config
