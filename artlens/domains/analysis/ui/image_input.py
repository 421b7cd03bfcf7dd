"""
이미지 입력 처리 컴포넌트 - 파일 업로드/카메라 촬영을 담당합니다.
"""
import streamlit as st

from artlens.app.core.session_state import SessionStateManager
from artlens.components.base import BaseComponent
from artlens.domains.analysis.types import ImageFile
from artlens.domains.analysis.ui.capture_controller import CaptureUploadController

CONTROLLER_KEY = "capture_upload_controller"


class ImageInputComponent(BaseComponent):
    """업로드/촬영 UI를 그리고 CaptureUploadController에 작업을 위임하는 컴포넌트입니다."""

    key_prefix = "artwork_input"

    def get_controller(self) -> CaptureUploadController:
        return SessionStateManager.get_or_create(
            CONTROLLER_KEY,
            lambda: CaptureUploadController(
                client=self.app_context.analysis_client,
                settings=self.app_context.camera_settings,
                on_upload_start=SessionStateManager.mark_upload_started,
                on_analysis_complete=SessionStateManager.update_analysis_result,
                on_error=SessionStateManager.record_error,
            ),
        )

    def render(self) -> None:
        controller = self.get_controller()
        if controller.camera_open:
            self._render_camera(controller)
        else:
            self._render_upload(controller)

    def _render_upload(self, controller: CaptureUploadController) -> None:
        """드래그 앤 드롭/파일 선택 영역"""
        state = SessionStateManager.get_upload_state()

        uploaded = st.file_uploader(
            "Upload artwork image",
            type=["jpeg", "jpg", "png", "webp"],
            accept_multiple_files=False,
            disabled=state.is_loading,
            help="Drag and drop an image here, or click to select",
            key=self.widget_key("uploader"),
        )

        if uploaded is not None:
            token = getattr(uploaded, "file_id", None) or f"{uploaded.name}:{uploaded.size}"
            if SessionStateManager.is_new_upload(token):
                image = ImageFile(uploaded.name, uploaded.type, uploaded.getvalue())
                with st.spinner("Analyzing artwork... This may take a few moments"):
                    controller.submit_file(image)

        if controller.preview is not None:
            st.image(controller.preview.data, caption="Uploaded artwork", width=320)
            st.caption("Upload a different image to analyze again")
        st.caption("Supports JPEG, PNG, and WebP formats")

        if controller.upload_error:
            st.error(controller.upload_error)

        if st.button("📷 Take Photo", disabled=state.is_loading, key=self.widget_key("take_photo")):
            controller.open_camera()
            st.rerun()

        if controller.camera_error:
            st.error(controller.camera_error)

    def _render_camera(self, controller: CaptureUploadController) -> None:
        """브라우저 카메라 촬영과 분석/취소 버튼"""
        st.subheader("Take a Photo")
        st.caption("Position your artwork in the frame and tap capture")

        camera_photo = st.camera_input("Capture artwork", key=self.widget_key("camera"))
        controller.receive_snapshot(camera_photo.getvalue() if camera_photo else None)

        if controller.camera_error:
            st.error(controller.camera_error)

        col1, col2 = st.columns(2)
        with col1:
            if st.button("📸 Analyze Photo", disabled=not controller.has_snapshot, key=self.widget_key("capture")):
                with st.spinner("Analyzing artwork... This may take a few moments"):
                    controller.capture()
                st.rerun()
        with col2:
            if st.button("Cancel", key=self.widget_key("cancel")):
                controller.cancel_camera()
                st.rerun()
