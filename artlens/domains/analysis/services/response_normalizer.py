"""
Vision 모델의 자유 텍스트 응답을 표준 분석 결과로 정규화합니다.

모델은 지시를 따르지 않을 수 있으므로, 응답을 파싱할 수 없으면 원문을 설명으로 쓰는
대체 결과를 만듭니다. 이 모듈은 어떤 입력에도 예외를 발생시키지 않습니다.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from artlens.app.core.error_handler import UpstreamFormatError
from artlens.app.core.logger import LogCategory, LogLevel, get_logger
from artlens.domains.analysis.services.color_fallback import extract_color_palette
from artlens.domains.analysis.types import (
    ArtistInfo,
    ArtworkDetails,
    ColorPalette,
    Difficulty,
    ReplicationGuide,
    MAX_PALETTE_COLORS,
)

logger = logging.getLogger(__name__)

FENCED_JSON_PATTERN = re.compile(r'```json\s*([\s\S]*?)\s*```', re.IGNORECASE)
BRACED_JSON_PATTERN = re.compile(r'\{[\s\S]*\}')
HEX_COLOR_PATTERN = re.compile(r'^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$')

UNKNOWN_ARTIST = "Unknown Artist"
DEFAULT_CONFIDENCE = 0.5
DEFAULT_MATERIALS = ["Canvas", "Paint", "Brushes"]
DEFAULT_TECHNIQUES = ["Basic painting techniques"]
DEFAULT_STEPS = ["1. Prepare your canvas", "2. Apply paint", "3. Add details"]


@dataclass
class NormalizedAnalysis:
    """정규화된 분석 필드 (이미지 URL 제외)"""
    artist_info: ArtistInfo
    analysis: ArtworkDetails
    replication_guide: ReplicationGuide
    color_palette: ColorPalette
    parsed: bool = True
    palette_source: str = "model"


def extract_json_candidate(response_text: str) -> str:
    """
    응답에서 JSON 후보 문자열을 추출합니다.

    1. ```json ... ``` 코드 블록이 있으면 그 안쪽
    2. 없으면 처음 '{'부터 마지막 '}'까지
    3. 둘 다 없으면 원문 전체
    """
    fenced = FENCED_JSON_PATTERN.search(response_text)
    if fenced:
        return fenced.group(1)

    braced = BRACED_JSON_PATTERN.search(response_text)
    if braced:
        return braced.group(0)

    return response_text


def parse_analysis_json(response_text: str) -> Dict[str, Any]:
    """JSON 후보를 파싱합니다. 객체가 아니면 UpstreamFormatError를 발생시킵니다."""
    candidate = extract_json_candidate(response_text)
    try:
        parsed = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, 너무 긴 정수 리터럴(ValueError), 과도한 중첩(RecursionError)
        raise UpstreamFormatError(f"모델 응답 JSON 파싱 실패: {type(e).__name__}: {e}", raw_text=response_text) from e

    if not isinstance(parsed, dict):
        raise UpstreamFormatError(
            f"모델 응답이 JSON 객체가 아닙니다: {type(parsed).__name__}",
            raw_text=response_text
        )
    return parsed


def normalize_colors(raw_colors: Any) -> List[str]:
    """유효한 hex 색상만 골라 '#RRGGBB' 대문자 형식으로 맞춥니다 (최대 8개)."""
    if isinstance(raw_colors, str):
        raw_colors = [raw_colors]
    if not isinstance(raw_colors, (list, tuple)):
        return []

    colors = []
    for raw in raw_colors:
        match = HEX_COLOR_PATTERN.match(str(raw).strip())
        if not match:
            continue
        digits = match.group(1)
        if len(digits) == 3:
            digits = ''.join(ch * 2 for ch in digits)
        colors.append(f"#{digits.upper()}")
        if len(colors) == MAX_PALETTE_COLORS:
            break
    return colors


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_text(value: Any, default: str) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    return str(value)


def _as_text_list(value: Any, default: List[str]) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return list(default)
    items = [str(item) for item in value if item is not None and str(item).strip()]
    return items or list(default)


class ResponseNormalizer:
    """모델 응답 텍스트를 표준 필드로 정규화하는 클래스"""

    def __init__(self, palette_generator: Callable[[bytes], ColorPalette] = extract_color_palette):
        self._palette_generator = palette_generator

    def normalize(self, response_text: str, image_bytes: bytes) -> NormalizedAnalysis:
        """응답을 파싱하고, 실패하면 대체 결과를 만듭니다. 팔레트는 항상 비어 있지 않습니다."""
        try:
            parsed = parse_analysis_json(response_text or "")
            artist_info, details, guide, colors = self._map_fields(parsed, response_text)
        except UpstreamFormatError as e:
            get_logger().log(
                LogLevel.WARNING, LogCategory.PARSING, __name__, "normalize",
                "soft_fallback", "모델 응답을 파싱하지 못해 기본 결과로 대체합니다.",
                error=e, context_data={"reply_preview": (response_text or "")[:200]}
            )
            return self._soft_fallback(response_text or "", image_bytes)

        palette, source = self._resolve_palette(colors, image_bytes)

        return NormalizedAnalysis(
            artist_info=artist_info,
            analysis=details,
            replication_guide=guide,
            color_palette=palette,
            parsed=True,
            palette_source=source,
        )

    def _map_fields(self, parsed: Dict[str, Any], response_text: str):
        try:
            return (
                self._map_artist(parsed),
                self._map_details(parsed),
                self._map_guide(parsed),
                normalize_colors(self._pick_colors(parsed)),
            )
        except (ValueError, TypeError, RecursionError) as e:
            raise UpstreamFormatError(
                f"모델 응답 필드를 해석할 수 없습니다: {type(e).__name__}: {e}",
                raw_text=response_text
            ) from e

    def _resolve_palette(self, colors: List[str], image_bytes: bytes):
        if colors:
            return ColorPalette.from_colors(colors), "model"
        logger.info("Model returned no usable colors, using fallback palette")
        return self._palette_generator(image_bytes), "fallback"

    def _soft_fallback(self, response_text: str, image_bytes: bytes) -> NormalizedAnalysis:
        palette, source = self._resolve_palette([], image_bytes)
        return NormalizedAnalysis(
            artist_info=ArtistInfo(
                name=UNKNOWN_ARTIST,
                description=response_text,
                confidence=DEFAULT_CONFIDENCE,
            ),
            analysis=ArtworkDetails(),
            replication_guide=ReplicationGuide(
                materials=list(DEFAULT_MATERIALS),
                techniques=list(DEFAULT_TECHNIQUES),
                steps=list(DEFAULT_STEPS),
                difficulty=Difficulty.BEGINNER,
            ),
            color_palette=palette,
            parsed=False,
            palette_source=source,
        )

    # ------------------------------------------------------------------
    # 필드 매핑 (flat 스키마 별칭 허용)
    # ------------------------------------------------------------------
    @staticmethod
    def _pick_colors(parsed: Dict[str, Any]) -> Any:
        palette = parsed.get("colorPalette")
        if isinstance(palette, dict) and palette.get("colors"):
            return palette.get("colors")
        if isinstance(palette, list):
            return palette
        return parsed.get("colors")

    @staticmethod
    def _map_artist(parsed: Dict[str, Any]) -> ArtistInfo:
        artist = parsed.get("artistInfo", parsed.get("artist"))
        if isinstance(artist, str):
            artist = {"name": artist}
        artist = _as_dict(artist)

        return ArtistInfo(
            name=_as_text(artist.get("name"), UNKNOWN_ARTIST),
            description=_as_text(artist.get("description", parsed.get("description")), ""),
            confidence=artist.get("confidence", DEFAULT_CONFIDENCE),
        )

    @staticmethod
    def _map_details(parsed: Dict[str, Any]) -> ArtworkDetails:
        details = _as_dict(parsed.get("analysis")) or _as_dict(parsed.get("artwork"))
        return ArtworkDetails(
            style=_as_text(details.get("style"), "Unknown"),
            period=_as_text(details.get("period"), "Unknown"),
            medium=_as_text(details.get("medium"), "Unknown"),
        )

    @staticmethod
    def _map_guide(parsed: Dict[str, Any]) -> ReplicationGuide:
        guide = _as_dict(parsed.get("replicationGuide")) or _as_dict(parsed.get("replication"))
        difficulty = Difficulty.coerce(guide.get("difficulty"))
        if guide.get("difficulty") is not None and difficulty.value != str(guide.get("difficulty")).strip().title():
            logger.warning(f"Unsupported difficulty from model replaced: {guide.get('difficulty')!r}")

        return ReplicationGuide(
            materials=_as_text_list(guide.get("materials"), DEFAULT_MATERIALS),
            techniques=_as_text_list(guide.get("techniques"), DEFAULT_TECHNIQUES),
            steps=_as_text_list(guide.get("steps"), DEFAULT_STEPS),
            difficulty=difficulty,
        )
