"""
작품 분석 엔드포인트의 처리 흐름을 담당하는 서비스.

이미지 수신 → 인코딩 → 추론 → 정규화 → 결과 조립을 한 번에 수행하며,
재시도나 저장 없이 요청마다 새 결과를 만듭니다.
"""
from typing import Any, Dict, Optional

from artlens.app.core.base_service import BaseService
from artlens.app.core.config import Config
from artlens.app.core.error_handler import InputError
from artlens.app.core.logger import LogCategory, log_step
from artlens.domains.analysis.services.analysis_request import build_analysis_request
from artlens.domains.analysis.services.openai_service import OpenAIService
from artlens.domains.analysis.services.response_normalizer import ResponseNormalizer
from artlens.domains.analysis.types import ArtworkAnalysisResult, ImageFile


class ArtworkAnalysisService(BaseService):
    """업로드된 작품 이미지를 분석하여 ArtworkAnalysisResult를 만드는 서비스"""

    def __init__(self, config: Config, openai_service: OpenAIService,
                 normalizer: Optional[ResponseNormalizer] = None):
        self.openai_service = openai_service
        self.normalizer = normalizer or ResponseNormalizer()
        super().__init__(config)

    def get_service_name(self) -> str:
        return "artwork_analysis_service"

    def get_service_version(self) -> str:
        return "1.0.0"

    def get_service_description(self) -> str:
        return "작품 이미지 분석 흐름 (요청 구성, 추론, 응답 정규화, 대체 팔레트)"

    def _perform_health_checks(self) -> Dict[str, Any]:
        return {'openai': self.openai_service.health_check().to_dict()}

    def _is_operational(self) -> bool:
        return self.openai_service.health_check().is_healthy

    def analyze(self, image: Optional[ImageFile]) -> ArtworkAnalysisResult:
        """
        작품 이미지를 분석합니다.

        Raises:
            InputError: 이미지가 없거나 비어 있는 경우
            UpstreamTransportError: 모델 호출 실패
        """
        if image is None or not image.data:
            raise InputError()

        with log_step(LogCategory.IMAGE_PROCESSING, __name__, "analyze", "encoding",
                      context_data={"filename": image.filename, "size": len(image.data)}):
            image_url = image.to_data_uri()

        with log_step(LogCategory.API_CALL, __name__, "analyze", "inferring"):
            request = build_analysis_request(
                image,
                model=self.config.openai.model,
                max_tokens=self.config.openai.max_tokens,
                image_data_uri=image_url,
            )
            reply_text = self.openai_service.complete(request)

        with log_step(LogCategory.PARSING, __name__, "analyze", "normalizing"):
            normalized = self.normalizer.normalize(reply_text, image.data)

        with log_step(LogCategory.SYSTEM, __name__, "analyze", "finalizing"):
            result = ArtworkAnalysisResult(
                image_url=image_url,
                artist_info=normalized.artist_info,
                color_palette=normalized.color_palette,
                analysis=normalized.analysis,
                replication_guide=normalized.replication_guide,
            )

        self._logger.info(
            f"Artwork analyzed: artist={result.artist_info.name!r}, "
            f"parsed={normalized.parsed}, palette={normalized.palette_source}"
        )
        return result


def build_analysis_service(config: Config, client: Optional[Any] = None) -> ArtworkAnalysisService:
    """설정으로부터 OpenAI 서비스와 분석 서비스를 구성합니다."""
    openai_service = OpenAIService(config, client=client)
    return ArtworkAnalysisService(config, openai_service=openai_service)
