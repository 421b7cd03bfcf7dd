"""
분석 결과 표시 컴포넌트

ArtworkAnalysisResult를 작가 정보, 색상 팔레트, 작품 정보, 재현 가이드 순서로 보여준다.
"""
from __future__ import annotations

import html
import re

import streamlit as st

from artlens.components.base import BaseComponent
from artlens.domains.analysis.types import ArtworkAnalysisResult, Difficulty

# 모델이 이미 붙인 "1." 같은 번호는 제거하고 다시 매긴다
STEP_NUMBER_PATTERN = re.compile(r"^\s*\d+[.)]\s*")

DIFFICULTY_BADGES = {
    Difficulty.BEGINNER: "🟢",
    Difficulty.INTERMEDIATE: "🟠",
    Difficulty.ADVANCED: "🔴",
}


def swatch_html(color: str, size: int = 48, label: bool = True) -> str:
    """색상 견본 HTML 블록"""
    color = html.escape(color)
    caption = f"<div style='font-size:0.7rem;color:#888'>{color}</div>" if label else ""
    return (
        "<div style='display:inline-flex;flex-direction:column;align-items:center;margin:4px'>"
        f"<div style='width:{size}px;height:{size}px;border-radius:8px;"
        f"border:2px solid #ccc;background:{color}'></div>{caption}</div>"
    )


class ResultsDisplayComponent(BaseComponent):
    """분석 결과를 표시하는 컴포넌트"""

    def render(self, result: ArtworkAnalysisResult) -> None:
        self._render_artist(result)
        self._render_palette(result)
        self._render_details(result)
        self._render_replication_guide(result)

    # ------------------------------------------------------------------
    # 섹션별 렌더링
    # ------------------------------------------------------------------
    def _render_artist(self, result: ArtworkAnalysisResult) -> None:
        artist = result.artist_info
        with st.container(border=True):
            st.subheader("👤 Artist Analysis")
            st.markdown(f"**{artist.name}**")
            st.write(artist.description)
            st.caption(f"Confidence: {round(artist.confidence * 100)}%")

    def _render_palette(self, result: ArtworkAnalysisResult) -> None:
        palette = result.color_palette
        with st.container(border=True):
            st.subheader("🎨 Color Palette")
            st.markdown(
                swatch_html(palette.dominant_color, size=32, label=False)
                + f"<span style='margin-left:8px'>Dominant: {html.escape(palette.dominant_color)}</span>",
                unsafe_allow_html=True,
            )
            st.markdown(''.join(swatch_html(color) for color in palette.colors), unsafe_allow_html=True)

    def _render_details(self, result: ArtworkAnalysisResult) -> None:
        details = result.analysis
        with st.container(border=True):
            st.subheader("📖 Artwork Details")
            col1, col2, col3 = st.columns(3)
            with col1:
                st.markdown("**Style**")
                st.write(details.style)
            with col2:
                st.markdown("**Period**")
                st.write(details.period)
            with col3:
                st.markdown("**Medium**")
                st.write(details.medium)

    def _render_replication_guide(self, result: ArtworkAnalysisResult) -> None:
        guide = result.replication_guide
        with st.container(border=True):
            st.subheader("🖌️ How to Replicate")
            st.markdown(f"{DIFFICULTY_BADGES[guide.difficulty]} **{guide.difficulty.value}**")

            st.markdown("##### Materials Needed")
            st.markdown('\n'.join(f"- {item}" for item in guide.materials))

            st.markdown("##### Techniques")
            st.markdown('\n'.join(f"- {item}" for item in guide.techniques))

            st.markdown("##### Step-by-Step Instructions")
            steps = [STEP_NUMBER_PATTERN.sub("", step) for step in guide.steps]
            st.markdown('\n'.join(f"{i}. {step}" for i, step in enumerate(steps, start=1)))
