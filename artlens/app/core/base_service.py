"""
ArtLens 서비스 공통 기반 클래스.

서비스는 생성 시점에 한 번 _initialize()를 실행하고, 그 결과를 상태로 보관합니다.
API 서버의 /api/health 는 health_check()와 get_service_info()를 그대로 노출합니다.
"""
from abc import ABC, abstractmethod
from typing import Any, Optional, Dict
from dataclasses import dataclass, field
import logging
from enum import Enum

from artlens.app.core.config import Config


class ServiceStatus(Enum):
    """서비스 상태"""
    INITIALIZING = "initializing"
    READY = "ready"
    ERROR = "error"


@dataclass
class ServiceInfo:
    """서비스 이름/버전/상태"""
    name: str
    version: str
    description: str
    status: ServiceStatus
    error_message: Optional[str] = None


@dataclass
class HealthCheckResult:
    """헬스체크 결과"""
    is_healthy: bool
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {'is_healthy': self.is_healthy, 'message': self.message, 'details': self.details}


class BaseService(ABC):
    """
    설정을 받아 한 번 초기화되는 서비스.

    _initialize()에서 발생한 예외는 상태를 ERROR로 남긴 뒤 그대로 전파됩니다.
    """

    def __init__(self, config: Config):
        self.config = config
        self._logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")
        self._status = ServiceStatus.INITIALIZING
        self._error_message: Optional[str] = None

        try:
            self._initialize()
        except Exception as e:
            self._status = ServiceStatus.ERROR
            self._error_message = str(e)
            self._logger.error(f"{self.get_service_name()} 초기화 실패: {e}")
            raise

        self._status = ServiceStatus.READY
        self._logger.info(f"{self.get_service_name()} ready")

    @abstractmethod
    def get_service_name(self) -> str:
        pass

    @abstractmethod
    def get_service_version(self) -> str:
        pass

    @abstractmethod
    def get_service_description(self) -> str:
        pass

    def _initialize(self) -> None:
        """하위 클래스의 초기화 훅"""

    def _perform_health_checks(self) -> Dict[str, Any]:
        """헬스체크 세부 정보. 예외가 나면 unhealthy로 보고됩니다."""
        return {}

    def _is_operational(self) -> bool:
        """필수 의존성이 갖춰져 요청을 처리할 수 있는지 여부"""
        return True

    def is_ready(self) -> bool:
        return self._status == ServiceStatus.READY

    def get_service_info(self) -> ServiceInfo:
        return ServiceInfo(
            name=self.get_service_name(),
            version=self.get_service_version(),
            description=self.get_service_description(),
            status=self._status,
            error_message=self._error_message,
        )

    def health_check(self) -> HealthCheckResult:
        """서비스 상태와 세부 점검 결과를 반환합니다."""
        name = self.get_service_name()
        if not self.is_ready():
            return HealthCheckResult(
                is_healthy=False,
                message=f"{name} is not ready",
                details={'status': self._status.value, 'error': self._error_message}
            )

        try:
            details = self._perform_health_checks()
        except Exception as e:
            self._logger.warning(f"{name} health check failed: {e}")
            return HealthCheckResult(is_healthy=False, message=f"{name} health check failed", details={'error': str(e)})

        if not self._is_operational():
            return HealthCheckResult(is_healthy=False, message=f"{name} is degraded", details=details)
        return HealthCheckResult(is_healthy=True, message=f"{name} is healthy", details=details)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} status='{self._status.value}'>"
