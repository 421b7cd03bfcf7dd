"""
작품 분석 도메인에서 사용되는 데이터 클래스를 정의합니다.

API 응답(JSON)은 camelCase 키를 사용하므로 각 클래스는 to_dict/from_dict로 변환합니다.
"""
import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple


MAX_PALETTE_COLORS = 8


class Difficulty(str, Enum):
    """작품 재현 난이도"""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

    @classmethod
    def coerce(cls, value: Any) -> "Difficulty":
        """대소문자를 무시하고 세 가지 난이도 중 하나로 맞춥니다. 그 외 값은 Beginner."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return cls.BEGINNER


def clamp_confidence(value: Any, default: float = 0.5) -> float:
    try:
        confidence = float(value)
    except OverflowError:
        # float 범위를 넘는 정수는 부호에 따라 양 끝으로
        return 1.0 if value > 0 else 0.0
    except (TypeError, ValueError):
        return default
    if confidence != confidence:  # NaN
        return default
    return min(max(confidence, 0.0), 1.0)


@dataclass
class ArtistInfo:
    """작가 추정 정보"""
    name: str
    description: str
    confidence: float

    def __post_init__(self):
        self.confidence = clamp_confidence(self.confidence)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description, "confidence": self.confidence}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArtistInfo":
        return cls(
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            confidence=data.get("confidence", 0.5),
        )


@dataclass(frozen=True)
class ColorPalette:
    """색상 팔레트. dominant_color는 항상 colors[0]입니다."""
    colors: Tuple[str, ...]
    dominant_color: str

    def __post_init__(self):
        if not self.colors:
            raise ValueError("팔레트에는 최소 한 개의 색상이 필요합니다.")
        if len(self.colors) > MAX_PALETTE_COLORS:
            raise ValueError(f"팔레트 색상은 최대 {MAX_PALETTE_COLORS}개입니다.")
        if self.dominant_color != self.colors[0]:
            raise ValueError("dominant_color는 첫 번째 색상이어야 합니다.")

    @classmethod
    def from_colors(cls, colors: Sequence[str]) -> "ColorPalette":
        trimmed = tuple(colors[:MAX_PALETTE_COLORS])
        return cls(colors=trimmed, dominant_color=trimmed[0] if trimmed else "")

    def to_dict(self) -> Dict[str, Any]:
        return {"colors": list(self.colors), "dominantColor": self.dominant_color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColorPalette":
        return cls.from_colors(list(data.get("colors") or []))


@dataclass
class ArtworkDetails:
    """작품 양식/시대/재료 분석 (JSON 키: analysis)"""
    style: str = "Unknown"
    period: str = "Unknown"
    medium: str = "Unknown"

    def to_dict(self) -> Dict[str, Any]:
        return {"style": self.style, "period": self.period, "medium": self.medium}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArtworkDetails":
        return cls(
            style=str(data.get("style", "Unknown")),
            period=str(data.get("period", "Unknown")),
            medium=str(data.get("medium", "Unknown")),
        )


@dataclass
class ReplicationGuide:
    """작품 재현 가이드"""
    materials: List[str] = field(default_factory=list)
    techniques: List[str] = field(default_factory=list)
    steps: List[str] = field(default_factory=list)
    difficulty: Difficulty = Difficulty.BEGINNER

    def __post_init__(self):
        self.difficulty = Difficulty.coerce(self.difficulty)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "materials": list(self.materials),
            "techniques": list(self.techniques),
            "steps": list(self.steps),
            "difficulty": self.difficulty.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReplicationGuide":
        return cls(
            materials=[str(item) for item in data.get("materials") or []],
            techniques=[str(item) for item in data.get("techniques") or []],
            steps=[str(item) for item in data.get("steps") or []],
            difficulty=data.get("difficulty"),
        )


@dataclass
class ArtworkAnalysisResult:
    """분석 엔드포인트가 반환하는 최종 결과. 요청마다 새로 만들어지며 저장되지 않습니다."""
    image_url: str
    artist_info: ArtistInfo
    color_palette: ColorPalette
    analysis: ArtworkDetails
    replication_guide: ReplicationGuide

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imageUrl": self.image_url,
            "artistInfo": self.artist_info.to_dict(),
            "colorPalette": self.color_palette.to_dict(),
            "analysis": self.analysis.to_dict(),
            "replicationGuide": self.replication_guide.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArtworkAnalysisResult":
        return cls(
            image_url=data["imageUrl"],
            artist_info=ArtistInfo.from_dict(data["artistInfo"]),
            color_palette=ColorPalette.from_dict(data["colorPalette"]),
            analysis=ArtworkDetails.from_dict(data["analysis"]),
            replication_guide=ReplicationGuide.from_dict(data["replicationGuide"]),
        )


@dataclass
class ImageFile:
    """업로드되거나 카메라로 촬영된 이미지 파일"""
    filename: str
    content_type: Optional[str]
    data: bytes = field(repr=False)

    @property
    def mime_type(self) -> str:
        return self.content_type or "image/jpeg"

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("utf-8")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"
