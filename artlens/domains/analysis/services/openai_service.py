"""OpenAI API와 상호 작용을 위한 서비스 모듈.

프로세스 시작 시 한 번 생성되어 분석 서비스에 주입됩니다. 테스트에서는
chat.completions.create를 가진 대체 클라이언트를 넘겨 사용합니다.
"""
from typing import Any, Dict, Optional

from openai import OpenAI, APIError

from artlens.app.core.base_service import BaseService
from artlens.app.core.config import Config
from artlens.app.core.error_handler import UpstreamTransportError
from artlens.domains.analysis.services.analysis_request import AnalysisRequest


class OpenAIService(BaseService):
    """OpenAI Vision API 서비스 클래스"""

    def __init__(self, config: Config, client: Optional[Any] = None):
        self._client: Optional[Any] = client
        self._api_key: Optional[str] = None
        super().__init__(config)

    def get_service_name(self) -> str:
        return "openai_service"

    def get_service_version(self) -> str:
        return "1.0.0"

    def get_service_description(self) -> str:
        return "OpenAI Vision API를 통한 작품 이미지 분석 서비스"

    def _initialize(self) -> None:
        """OpenAI 서비스 초기화"""
        self._api_key = self.config.openai.api_key

        if self._client is not None:
            self._logger.info("Using injected OpenAI client")
            return

        if not self._api_key:
            self._logger.warning("OpenAI API 키가 설정되지 않았습니다.")
            return

        # 재시도 없음: 모든 외부 오류는 한 번만 호출자에게 전달됩니다.
        self._client = OpenAI(api_key=self._api_key, max_retries=0)
        self._logger.info("OpenAI client initialized successfully")

    def _perform_health_checks(self) -> Dict[str, Any]:
        """OpenAI 서비스 헬스체크"""
        return {
            'api_key_available': bool(self._api_key),
            'client_initialized': bool(self._client),
            'model': self.config.openai.model,
        }

    def has_client(self) -> bool:
        return self._client is not None

    def _is_operational(self) -> bool:
        return self.has_client()

    def complete(self, request: AnalysisRequest) -> str:
        """
        분석 요청을 모델로 보내고 응답 텍스트를 반환합니다.

        Args:
            request: 지시문과 이미지가 담긴 분석 요청

        Returns:
            str: 모델 응답 텍스트 (JSON이 포함되어 있다고 기대하지만 보장되지 않음)

        Raises:
            UpstreamTransportError: 인증/네트워크/할당량 오류 또는 빈 응답
        """
        if not self._client:
            raise UpstreamTransportError(
                "OpenAI API key is not configured",
                suggestion="OPENAI_API_KEY 환경 변수 또는 .env 파일을 설정해주세요."
            )

        kwargs: Dict[str, Any] = {
            "model": request.model,
            "messages": request.to_messages(),
            "max_tokens": request.max_tokens,
        }
        if self.config.openai.timeout:
            kwargs["timeout"] = self.config.openai.timeout

        try:
            response = self._client.chat.completions.create(**kwargs)
        except APIError as e:
            raise UpstreamTransportError(
                f"OpenAI API call failed ({type(e).__name__}): check OPENAI_API_KEY and access to model '{request.model}'",
                original_exception=e
            ) from e

        choice = response.choices[0] if response.choices else None
        output_text = (choice.message.content if choice and choice.message else None) or ""

        finish_reason = getattr(choice, "finish_reason", None)
        self._logger.info(
            f"LLM response received: model={request.model}, "
            f"output_length={len(output_text)}, "
            f"finish_reason={finish_reason}"
        )

        # finish_reason가 'length'면 max_tokens 제한에 도달한 것
        if finish_reason == 'length':
            self._logger.warning(
                f"응답이 max_tokens({request.max_tokens}) 제한에 도달했습니다. "
                f"응답 길이: {len(output_text)} 문자."
            )

        if not output_text:
            raise UpstreamTransportError(f"No response from model '{request.model}'")

        return output_text
