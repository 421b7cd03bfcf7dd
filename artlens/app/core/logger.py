"""
구조화 로깅.

분석 흐름의 각 단계(인코딩, 추론, 정규화, 카메라 조작 등)를 LogEntry로 남깁니다.
엔트리는 메모리에 최근 것부터 보관되고, 설정에 따라 날짜별 JSONL 파일
(artlens_YYYYMMDD.jsonl)에도 기록되며, 표준 logging으로도 출력됩니다.
"""
import os
import json
import logging
import threading
import traceback
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from functools import wraps
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional

MAX_ENTRIES = 5000


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogCategory(Enum):
    """로그 카테고리 (분석 흐름의 영역)"""
    SYSTEM = "SYSTEM"
    API_CALL = "API_CALL"
    IMAGE_PROCESSING = "IMAGE_PROCESSING"
    PARSING = "PARSING"
    CAMERA = "CAMERA"
    UI_INTERACTION = "UI_INTERACTION"


@dataclass
class LogEntry:
    """한 단계의 구조화된 로그"""
    timestamp: str
    level: LogLevel
    category: LogCategory
    module: str
    function: str
    step: str
    message: str
    duration_ms: Optional[float] = None
    success: Optional[bool] = None
    error_type: Optional[str] = None
    error_message: Optional[str] = None
    context_data: Optional[Dict[str, Any]] = None
    stack_trace: Optional[str] = None

    def to_json(self) -> str:
        data = asdict(self)
        data['level'] = self.level.value
        data['category'] = self.category.value
        return json.dumps(data, ensure_ascii=False, default=str)


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ('true', '1', 'yes')


class ArtLensLogger:
    """프로세스 전역 구조화 로거 (싱글턴)"""

    _instance: Optional["ArtLensLogger"] = None
    _instance_lock = threading.Lock()

    def __new__(cls):
        with cls._instance_lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._setup()
                cls._instance = instance
        return cls._instance

    def _setup(self) -> None:
        self._entries: Deque[LogEntry] = deque(maxlen=MAX_ENTRIES)
        self._entries_lock = threading.Lock()
        self._std_logger = logging.getLogger('artlens')
        self.log_file_path: Optional[str] = None
        self.configure()

    def configure(self, log_dir: Optional[str] = None, to_file: Optional[bool] = None,
                  level: Optional[str] = None) -> None:
        """
        출력 대상을 설정합니다. 인자를 생략하면 ARTLENS_LOG_TO_FILE,
        ARTLENS_LOG_DIR, ARTLENS_LOG_LEVEL 환경 변수를 따릅니다.
        """
        level_name = (level or os.environ.get("ARTLENS_LOG_LEVEL", "INFO")).upper()
        logging.basicConfig(
            level=getattr(logging, level_name, logging.INFO),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        )

        if to_file is None:
            to_file = _env_flag("ARTLENS_LOG_TO_FILE", "true")
        if not to_file:
            self.log_file_path = None
            return

        log_dir = log_dir or os.environ.get("ARTLENS_LOG_DIR") or os.path.join(os.getcwd(), "logs")
        os.makedirs(log_dir, exist_ok=True)
        self.log_file_path = os.path.join(log_dir, f"artlens_{datetime.now():%Y%m%d}.jsonl")

    def log(self, level: LogLevel, category: LogCategory, module: str, function: str,
            step: str, message: str, success: Optional[bool] = None,
            duration_ms: Optional[float] = None, error: Optional[BaseException] = None,
            context_data: Optional[Dict[str, Any]] = None) -> LogEntry:
        """엔트리를 만들어 메모리/파일/표준 로거에 기록합니다."""
        entry = LogEntry(
            timestamp=datetime.now().isoformat(),
            level=level,
            category=category,
            module=module,
            function=function,
            step=step,
            message=message,
            duration_ms=duration_ms,
            success=False if error is not None else success,
            context_data=context_data,
        )
        if error is not None:
            entry.error_type = type(error).__name__
            entry.error_message = str(error)
            entry.stack_trace = ''.join(traceback.format_exception(type(error), error, error.__traceback__))

        with self._entries_lock:
            self._entries.append(entry)

        if self.log_file_path:
            self._append_to_file(entry)

        suffix = ''
        if entry.success is not None:
            suffix += f" (success: {entry.success})"
        if duration_ms:
            suffix += f" ({duration_ms:.2f}ms)"
        self._std_logger.log(
            getattr(logging, level.value),
            f"[{category.value}] {module}::{function}::{step} - {message}{suffix}"
        )
        return entry

    def _append_to_file(self, entry: LogEntry) -> None:
        try:
            with open(self.log_file_path, 'a', encoding='utf-8') as f:
                f.write(entry.to_json() + '\n')
        except OSError as e:
            # 파일 기록 실패로 분석 요청을 실패시키지 않음
            self._std_logger.warning(f"로그 파일 쓰기 실패: {e}")

    def get_logs(self, level_filter: Optional[LogLevel] = None,
                 category_filter: Optional[LogCategory] = None,
                 success_filter: Optional[bool] = None,
                 limit: Optional[int] = None) -> List[LogEntry]:
        """조건에 맞는 엔트리를 최신순으로 반환합니다."""
        with self._entries_lock:
            entries = list(reversed(self._entries))

        matched = [
            entry for entry in entries
            if (level_filter is None or entry.level == level_filter)
            and (category_filter is None or entry.category == category_filter)
            and (success_filter is None or entry.success == success_filter)
        ]
        return matched[:limit] if limit else matched

    def clear_logs(self) -> None:
        """메모리의 엔트리만 비웁니다."""
        with self._entries_lock:
            self._entries.clear()


def get_logger() -> ArtLensLogger:
    return ArtLensLogger()


@contextmanager
def log_step(category: LogCategory, module: str, function: str, step: str,
             context_data: Optional[Dict[str, Any]] = None) -> Iterator[None]:
    """단계 시작/완료/실패와 소요 시간을 기록합니다. 예외는 그대로 전파됩니다."""
    logger = get_logger()
    logger.log(LogLevel.DEBUG, category, module, function, f"{step}_start",
               f"{step} started", context_data=context_data)
    started = datetime.now()
    try:
        yield
    except Exception as e:
        elapsed = (datetime.now() - started).total_seconds() * 1000
        logger.log(LogLevel.ERROR, category, module, function, f"{step}_error",
                   f"{step} failed", duration_ms=elapsed, error=e)
        raise
    elapsed = (datetime.now() - started).total_seconds() * 1000
    logger.log(LogLevel.INFO, category, module, function, f"{step}_done",
               f"{step} completed", success=True, duration_ms=elapsed)


def log_function(category: LogCategory, step_name: Optional[str] = None):
    """함수 호출 전체를 하나의 log_step으로 감싸는 데코레이터"""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args, **kwargs):
            with log_step(category, func.__module__, func.__name__, step_name or func.__name__):
                return func(*args, **kwargs)
        return wrapper
    return decorator
