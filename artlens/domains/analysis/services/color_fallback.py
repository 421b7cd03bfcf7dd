"""
모델이 색상 정보를 주지 않았을 때 사용하는 대체 팔레트 생성기.

실제 픽셀을 분석하지 않고, 이미지 바이트의 해시로 고정 팔레트의 순서를 정합니다.
같은 바이트에 대해서는 항상 같은 팔레트를 반환합니다.
"""
import base64
import hashlib
import logging
from typing import Sequence

from artlens.app.core.error_handler import handle_errors
from artlens.domains.analysis.types import ColorPalette, MAX_PALETTE_COLORS

logger = logging.getLogger(__name__)

BASE_COLORS = (
    '#FF6B6B', '#4ECDC4', '#45B7D1', '#96CEB4', '#FFEAA7',
    '#DDA0DD', '#98D8C8', '#F7DC6F', '#BB8FCE', '#85C1E9',
    '#F8C471', '#82E0AA', '#F1948A', '#85C1E9', '#D7BDE2',
    '#FAD7A0', '#ABEBC6', '#F9E79F', '#D5A6BD', '#A9CCE3',
)

DEFAULT_PALETTE = ColorPalette(
    colors=('#000000', '#FFFFFF', '#808080', '#FF0000', '#00FF00', '#0000FF'),
    dominant_color='#000000',
)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def simple_hash(text: str) -> int:
    """31배 누적 롤링 해시 (32비트 부호 정수로 절단 후 절댓값)."""
    hash_value = 0
    for char in text:
        hash_value = _to_int32((hash_value << 5) - hash_value + ord(char))
    return abs(hash_value)


def order_colors(seed: int, colors: Sequence[str] = BASE_COLORS) -> list[str]:
    """seed와 각 색상의 위치로 정렬 키를 만들어 팔레트를 섞습니다. 중복 색상은 제거합니다."""
    def sort_key(index: int) -> bytes:
        return hashlib.sha256(f"{seed}:{index}".encode("ascii")).digest()

    ordered = [colors[i] for i in sorted(range(len(colors)), key=sort_key)]
    return list(dict.fromkeys(ordered))


@handle_errors(show_user_message=False, fallback_return=DEFAULT_PALETTE)
def extract_color_palette(image_bytes: bytes) -> ColorPalette:
    """이미지 바이트로부터 결정적인 8색 팔레트를 생성합니다. 실패하면 기본 6색 팔레트."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    seed = simple_hash(encoded) % 1000
    colors = order_colors(seed)[:MAX_PALETTE_COLORS]
    logger.debug(f"Fallback palette generated: seed={seed}, dominant={colors[0]}")
    return ColorPalette.from_colors(colors)
