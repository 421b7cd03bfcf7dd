"""
Streamlit 애플리케이션의 메인 파일입니다.

작품 이미지를 업로드하거나 촬영하면 분석 API를 호출하고 결과를 보여줍니다.
분석 API는 `artlens-api`(uvicorn)로 별도 실행합니다.
"""
import streamlit as st

from artlens.app.core.app_factory import get_application
from artlens.app.core.error_handler import handle_errors, create_streamlit_error_ui, get_error_handler
from artlens.app.core.session_state import SessionStateManager
from artlens.pages.artwork_analysis import ArtworkAnalysisPage


@handle_errors(show_user_message=True, reraise=False)
def main():
    """애플리케이션의 메인 함수입니다."""
    # 애플리케이션 컨텍스트 초기화
    try:
        app_context = get_application()
    except Exception as e:
        st.set_page_config(page_title="Artwork Analyzer", page_icon="🎨")
        st.error("애플리케이션 초기화에 실패했습니다.")
        create_streamlit_error_ui(get_error_handler().handle_error(e))
        st.stop()

    st.set_page_config(
        page_title=app_context.config.page_title,
        page_icon=app_context.config.page_icon,
        layout="centered"
    )

    SessionStateManager.init_upload_state()

    page = ArtworkAnalysisPage(app_context)
    page.render()


if __name__ == "__main__":
    main()
