"""
Vision 모델에 보낼 작품 분석 요청을 구성합니다.

모델의 출력은 자유 텍스트이므로, 프롬프트에 기대하는 JSON 필드 이름과 타입을
모두 명시해야 합니다. 프롬프트의 스키마가 바뀌면 ResponseNormalizer도 함께 바꿔야 합니다.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from artlens.domains.analysis.types import ImageFile

DEFAULT_MODEL = "gpt-4o"
DEFAULT_MAX_TOKENS = 2000

ANALYSIS_PROMPT = """Analyze this artwork and respond with a single JSON object inside a ```json code block.
Use exactly these field names and types:

{
  "artistInfo": {
    "name": string,          // the most likely artist name, or "Unknown" if uncertain
    "description": string,   // a brief description of the artwork and the artist's style
    "confidence": number     // between 0 and 1, confidence in the artist attribution
  },
  "analysis": {
    "style": string,         // artistic style, e.g. Impressionism, Abstract, Renaissance
    "period": string,        // likely time period or era
    "medium": string         // likely medium, e.g. oil paint, watercolor, digital
  },
  "colorPalette": {
    "colors": [string]       // up to 8 dominant colors as hex codes like "#A1B2C3", most dominant first
  },
  "replicationGuide": {
    "materials": [string],   // materials needed to replicate this artwork
    "techniques": [string],  // painting/artistic techniques used
    "steps": [string],       // step-by-step instructions for replication, in order
    "difficulty": string     // exactly one of "Beginner", "Intermediate", "Advanced"
  }
}

Please provide detailed, practical information that would help someone recreate this artwork.
Focus on the visual characteristics, techniques, and materials that would be most effective.
Do not include any field that is not listed above."""


@dataclass
class AnalysisRequest:
    """단일 추론 요청 (지시문 + 인라인 이미지)"""
    prompt: str
    image_data_uri: str
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS

    def to_messages(self) -> List[Dict[str, Any]]:
        """chat.completions 형식의 메시지 목록을 반환합니다."""
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": self.prompt},
                    {
                        "type": "image_url",
                        "image_url": {"url": self.image_data_uri},
                    },
                ],
            }
        ]


def build_analysis_request(
    image: ImageFile,
    model: str = DEFAULT_MODEL,
    max_tokens: int = DEFAULT_MAX_TOKENS,
    prompt: str = ANALYSIS_PROMPT,
    image_data_uri: Optional[str] = None,
) -> AnalysisRequest:
    """이미지와 고정 지시문으로 분석 요청을 만듭니다. 이미 인코딩된 data URI가 있으면 재사용합니다."""
    return AnalysisRequest(
        prompt=prompt,
        image_data_uri=image_data_uri or image.to_data_uri(),
        model=model,
        max_tokens=max_tokens,
    )
