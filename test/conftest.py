import io
import os
import sys
import json
from types import SimpleNamespace

import pytest
from PIL import Image

# 테스트 중에는 JSONL 로그 파일을 만들지 않는다
os.environ.setdefault("ARTLENS_LOG_TO_FILE", "false")

# 프로젝트 경로 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from artlens.app.core.config import Config


class FakeCompletions:
    """chat.completions.create 호출을 기록하고 준비된 응답을 돌려주는 대체 객체"""

    def __init__(self, reply=None, error=None, finish_reason="stop"):
        self.reply = reply
        self.error = error
        self.finish_reason = finish_reason
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message, finish_reason=self.finish_reason)])


class FakeOpenAIClient:
    def __init__(self, reply=None, error=None, finish_reason="stop"):
        self.completions = FakeCompletions(reply, error, finish_reason)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def calls(self):
        return self.completions.calls


def make_image_bytes(width=64, height=48, color=(120, 80, 200), fmt="PNG"):
    img = Image.new("RGB", (width, height), color=color)
    out = io.BytesIO()
    img.save(out, format=fmt)
    return out.getvalue()


def fenced_reply(payload: dict, prose: str = "Here is the analysis:") -> str:
    return f"{prose}\n```json\n{json.dumps(payload)}\n```\nLet me know if you need more."


FULL_PAYLOAD = {
    "artistInfo": {
        "name": "Claude Monet",
        "description": "Loose brushwork capturing light on water.",
        "confidence": 0.82,
    },
    "analysis": {"style": "Impressionism", "period": "Late 19th century", "medium": "Oil on canvas"},
    "colorPalette": {"colors": ["#4a6fa5", "#F2E8CF", "#88b04b"]},
    "replicationGuide": {
        "materials": ["Stretched canvas", "Oil paints", "Filbert brushes"],
        "techniques": ["Broken color", "Wet-on-wet"],
        "steps": ["Tone the canvas", "Block in shapes", "Add highlights"],
        "difficulty": "Intermediate",
    },
}


@pytest.fixture
def config():
    cfg = Config(log_to_file=False)
    cfg.openai.api_key = "sk-test"
    return cfg


@pytest.fixture
def image_bytes():
    return make_image_bytes()
