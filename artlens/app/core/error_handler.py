"""
ArtLens 예외 계층과 오류 처리기.

도메인 예외는 모두 BaseError를 상속하며 카테고리, 심각도, 사용자 제안을 가집니다.
ErrorHandler는 예외를 ErrorInfo로 바꿔 로그로 남기고, Streamlit 화면에서는
create_streamlit_error_ui로 표시합니다.
"""
from typing import Optional, Dict, Any, Callable, Type
from dataclasses import dataclass
from enum import Enum
import logging
import traceback
import functools

logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """오류 심각도"""
    LOW = "low"           # 대체 동작으로 계속 진행
    MEDIUM = "medium"     # 해당 요청만 실패
    HIGH = "high"         # 설정/자격 증명 확인 필요
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """오류 카테고리"""
    CONFIGURATION = "configuration"
    NETWORK = "network"
    VALIDATION = "validation"
    EXTERNAL_API = "external_api"    # OpenAI 호출/응답
    USER_INPUT = "user_input"        # 업로드 누락 등
    DEVICE = "device"                # 카메라
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """오류가 발생한 위치 정보"""
    function_name: Optional[str] = None
    input_data: Optional[Dict[str, Any]] = None


@dataclass
class ErrorInfo:
    """로그와 UI 표시에 쓰이는 오류 정보"""
    error_id: str
    category: ErrorCategory
    severity: ErrorSeverity
    title: str
    message: str
    details: Optional[str] = None
    suggestion: Optional[str] = None
    context: Optional[ErrorContext] = None
    original_exception: Optional[Exception] = None
    stack_trace: Optional[str] = None


class BaseError(Exception):
    """ArtLens 예외의 기반 클래스"""

    category = ErrorCategory.UNKNOWN
    severity = ErrorSeverity.MEDIUM
    default_suggestion: Optional[str] = None

    def __init__(self, message: str, suggestion: Optional[str] = None,
                 original_exception: Optional[Exception] = None):
        super().__init__(message)
        self.suggestion = suggestion or self.default_suggestion
        self.original_exception = original_exception


class ConfigurationError(BaseError):
    """설정값 오류"""
    category = ErrorCategory.CONFIGURATION
    severity = ErrorSeverity.HIGH
    default_suggestion = "환경 변수(.env)의 ARTLENS_* 설정을 확인해주세요."


class NetworkError(BaseError):
    """네트워크 오류"""
    category = ErrorCategory.NETWORK
    default_suggestion = "네트워크 연결을 확인하고 다시 시도해주세요."


class ValidationError(BaseError):
    """데이터 검증 오류"""
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.LOW


class InputError(ValidationError):
    """분석할 이미지가 제공되지 않은 경우 (HTTP 400)"""
    category = ErrorCategory.USER_INPUT
    default_suggestion = "image 필드에 이미지 파일을 첨부해주세요."

    def __init__(self, message: str = "No image file provided", **kwargs):
        super().__init__(message, **kwargs)


class UpstreamTransportError(NetworkError):
    """외부 추론 서비스 호출 실패 - 인증, 네트워크, 할당량, 빈 응답 (HTTP 500)"""
    category = ErrorCategory.EXTERNAL_API
    severity = ErrorSeverity.HIGH
    default_suggestion = "OPENAI_API_KEY와 모델 접근 권한을 확인해주세요."


class UpstreamFormatError(ValidationError):
    """모델 응답을 JSON 객체로 해석할 수 없는 경우. 정규화 단계에서 복구됩니다."""
    category = ErrorCategory.EXTERNAL_API
    default_suggestion = "기본 분석 결과로 대체합니다."

    def __init__(self, message: str, raw_text: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.raw_text = raw_text


class CaptureDeviceError(BaseError):
    """카메라 권한 거부 또는 장치 사용 불가"""
    category = ErrorCategory.DEVICE
    severity = ErrorSeverity.LOW
    default_suggestion = "카메라 권한을 확인하거나 이미지 파일을 업로드해주세요."

    def __init__(self, message: str = "Unable to access camera. Please check permissions.", **kwargs):
        super().__init__(message, **kwargs)


class AnalysisRequestError(NetworkError):
    """분석 엔드포인트 호출 실패 (UI 측)"""

    def __init__(self, message: str = "Failed to analyze artwork", status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class ErrorHandler:
    """예외를 ErrorInfo로 변환하고 로그로 남기는 처리기"""

    _LOG_LEVELS = {
        ErrorSeverity.LOW: logging.WARNING,
        ErrorSeverity.MEDIUM: logging.ERROR,
        ErrorSeverity.HIGH: logging.ERROR,
        ErrorSeverity.CRITICAL: logging.CRITICAL,
    }

    def __init__(self):
        self._builtin_handlers: Dict[Type[Exception], Callable[[Exception], ErrorInfo]] = {
            ValueError: self._handle_value_error,
            TimeoutError: self._handle_timeout_error,
        }

    def handle_error(self, exception: Exception, context: Optional[ErrorContext] = None) -> ErrorInfo:
        """예외를 처리하고 ErrorInfo를 반환합니다."""
        if isinstance(exception, BaseError):
            error_info = self._handle_base_error(exception)
        else:
            handler = next(
                (h for t, h in self._builtin_handlers.items() if isinstance(exception, t)),
                self._handle_unknown_error
            )
            error_info = handler(exception)

        error_info.context = context or ErrorContext()
        error_info.original_exception = exception
        error_info.stack_trace = ''.join(
            traceback.format_exception(type(exception), exception, exception.__traceback__)
        )

        location = error_info.context.function_name
        logger.log(
            self._LOG_LEVELS.get(error_info.severity, logging.ERROR),
            f"[{error_info.error_id}] {error_info.title}: {error_info.message}"
            + (f" (in {location})" if location else "")
        )
        return error_info

    @staticmethod
    def _handle_base_error(exception: BaseError) -> ErrorInfo:
        cause = exception.original_exception
        return ErrorInfo(
            error_id=f"{exception.category.value}_{id(exception)}",
            category=exception.category,
            severity=exception.severity,
            title=f"{exception.category.value.replace('_', ' ').title()} Error",
            message=str(exception),
            details=f"{type(cause).__name__}: {cause}" if cause else None,
            suggestion=exception.suggestion
        )

    @staticmethod
    def _handle_value_error(exception: Exception) -> ErrorInfo:
        return ErrorInfo(
            error_id=f"value_{id(exception)}",
            category=ErrorCategory.VALIDATION,
            severity=ErrorSeverity.LOW,
            title="잘못된 값",
            message="이미지 또는 응답 데이터를 처리할 수 없습니다.",
            details=str(exception)
        )

    @staticmethod
    def _handle_timeout_error(exception: Exception) -> ErrorInfo:
        return ErrorInfo(
            error_id=f"timeout_{id(exception)}",
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.MEDIUM,
            title="시간 초과",
            message="분석 요청이 시간 초과되었습니다.",
            suggestion="잠시 후 다시 시도하거나 ARTLENS_CLIENT_TIMEOUT 값을 늘려보세요.",
            details=str(exception)
        )

    @staticmethod
    def _handle_unknown_error(exception: Exception) -> ErrorInfo:
        return ErrorInfo(
            error_id=f"unknown_{id(exception)}",
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.MEDIUM,
            title="예상치 못한 오류",
            message="예상치 못한 오류가 발생했습니다.",
            details=f"{type(exception).__name__}: {exception}"
        )


_global_error_handler = ErrorHandler()


def get_error_handler() -> ErrorHandler:
    """전역 오류 처리기를 반환합니다."""
    return _global_error_handler


def handle_errors(show_user_message: bool = True, reraise: bool = False, fallback_return=None):
    """
    함수 데코레이터: 예외를 처리기로 넘기고 fallback_return을 반환합니다.

    show_user_message가 True이면 Streamlit 화면에 오류를 표시합니다.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                error_info = get_error_handler().handle_error(
                    e,
                    ErrorContext(
                        function_name=func.__name__,
                        input_data={'args': repr(args)[:200], 'kwargs': repr(kwargs)[:200]}
                    )
                )
                if show_user_message:
                    create_streamlit_error_ui(error_info)
                if reraise:
                    raise
                return fallback_return

        return wrapper
    return decorator


def create_streamlit_error_ui(error_info: ErrorInfo) -> None:
    """Streamlit 화면에 오류를 표시합니다."""
    import streamlit as st

    show = {
        ErrorSeverity.CRITICAL: st.error,
        ErrorSeverity.HIGH: st.error,
        ErrorSeverity.MEDIUM: st.warning,
    }.get(error_info.severity, st.info)
    show(f"**{error_info.title}**\n\n{error_info.message}")

    if error_info.suggestion:
        st.caption(f"💡 {error_info.suggestion}")

    if error_info.details and st.session_state.get('debug_mode', False):
        with st.expander("상세 정보 (개발용)"):
            st.code(error_info.details)
            if error_info.stack_trace:
                st.code(error_info.stack_trace)
