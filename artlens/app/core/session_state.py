"""
Streamlit 세션 상태를 체계적으로 관리하는 모듈입니다.
업로드 세션(미리보기, 로딩 여부, 결과)과 세션별 컨트롤러를 한 곳에서 다룹니다.
"""
import streamlit as st
from dataclasses import dataclass
from typing import Callable, Optional

from artlens.domains.analysis.types import ArtworkAnalysisResult


@dataclass
class UploadSessionState:
    """업로드 관련 세션 상태를 관리하는 데이터 클래스"""
    is_loading: bool = False
    analysis_result: Optional[ArtworkAnalysisResult] = None
    last_error: Optional[str] = None
    last_upload_token: Optional[str] = None


class SessionStateManager:
    """세션 상태 전반을 관리하는 헬퍼 클래스"""

    KEYS = ['is_loading', 'analysis_result', 'last_error', 'last_upload_token']

    @staticmethod
    def init_upload_state() -> UploadSessionState:
        """업로드 관련 세션 상태를 초기화하거나 가져옵니다"""
        defaults = UploadSessionState()
        for key in SessionStateManager.KEYS:
            if key not in st.session_state:
                st.session_state[key] = getattr(defaults, key)

        return SessionStateManager.get_upload_state()

    @staticmethod
    def get_upload_state() -> UploadSessionState:
        return UploadSessionState(
            is_loading=st.session_state.get('is_loading', False),
            analysis_result=st.session_state.get('analysis_result'),
            last_error=st.session_state.get('last_error'),
            last_upload_token=st.session_state.get('last_upload_token'),
        )

    @staticmethod
    def mark_upload_started() -> None:
        """새 업로드가 시작되면 이전 결과를 지우고 로딩 상태로 전환합니다"""
        st.session_state.is_loading = True
        st.session_state.analysis_result = None
        st.session_state.last_error = None

    @staticmethod
    def update_analysis_result(result: ArtworkAnalysisResult) -> None:
        """분석 결과를 세션 상태에 저장합니다"""
        st.session_state.analysis_result = result
        st.session_state.is_loading = False

    @staticmethod
    def record_error(message: str) -> None:
        st.session_state.last_error = message
        st.session_state.is_loading = False

    @staticmethod
    def is_new_upload(token: str) -> bool:
        """같은 파일이 rerun마다 다시 제출되지 않도록 토큰을 비교합니다"""
        if st.session_state.get('last_upload_token') == token:
            return False
        st.session_state.last_upload_token = token
        return True

    @staticmethod
    def get_or_create(key: str, factory: Callable[[], object]):
        """세션별 객체(예: 컨트롤러)를 한 번만 생성해 보관합니다"""
        if key not in st.session_state:
            st.session_state[key] = factory()
        return st.session_state[key]
