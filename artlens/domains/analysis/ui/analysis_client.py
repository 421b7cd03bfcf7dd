"""분석 엔드포인트를 호출하는 HTTP 클라이언트."""
import logging

import requests

from artlens.app.core.error_handler import AnalysisRequestError
from artlens.domains.analysis.types import ArtworkAnalysisResult, ImageFile

logger = logging.getLogger(__name__)


class ArtworkAnalysisClient:
    """POST /api/analyze-artwork 로 이미지를 업로드하고 결과를 받습니다."""

    def __init__(self, endpoint_url: str, timeout: float = 120.0):
        self.endpoint_url = endpoint_url
        self.timeout = timeout

    def analyze(self, image: ImageFile) -> ArtworkAnalysisResult:
        try:
            response = requests.post(
                self.endpoint_url,
                files={"image": (image.filename, image.data, image.mime_type)},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise AnalysisRequestError(f"Analysis endpoint unreachable: {e}", original_exception=e) from e

        if not response.ok:
            try:
                message = response.json().get("error", response.reason)
            except (ValueError, AttributeError):
                message = response.reason
            logger.error(f"Analysis endpoint returned {response.status_code}: {message}")
            raise AnalysisRequestError(str(message), status_code=response.status_code)

        try:
            return ArtworkAnalysisResult.from_dict(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise AnalysisRequestError(f"Malformed analysis response: {e}", original_exception=e) from e
