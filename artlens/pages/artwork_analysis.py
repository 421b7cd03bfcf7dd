"""
작품 분석 페이지 - 업로드/촬영 영역과 분석 결과를 배치합니다.
"""
import streamlit as st

from artlens.app.core.session_state import SessionStateManager
from artlens.components.base import BaseComponent
from artlens.domains.analysis.ui.image_input import ImageInputComponent
from artlens.domains.analysis.ui.results_display import ResultsDisplayComponent


class ArtworkAnalysisPage(BaseComponent):
    """작품 분석 페이지를 관리하는 컴포넌트입니다."""

    def __init__(self, app_context):
        super().__init__(app_context)
        self.image_input = ImageInputComponent(app_context)
        self.results_display = ResultsDisplayComponent(app_context)

    def render(self) -> None:
        st.title("Artwork Analyzer")
        st.write(
            "Upload an artwork image or take a photo with your camera to get AI-powered insights "
            "about the artist, color palette, and step-by-step replication instructions."
        )

        self.image_input.render()

        state = SessionStateManager.get_upload_state()
        if state.last_error:
            st.error(state.last_error)

        if state.analysis_result is not None:
            st.markdown("---")
            self.results_display.render(state.analysis_result)
