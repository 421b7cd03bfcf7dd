import httpx
import openai
import pytest
from fastapi.testclient import TestClient

from artlens.api.server import create_app
from artlens.domains.analysis.services.artwork_analysis_service import build_analysis_service
from artlens.domains.analysis.services.color_fallback import extract_color_palette
from conftest import FULL_PAYLOAD, FakeOpenAIClient, fenced_reply


def _client(config, fake):
    app = create_app(config, analysis_service=build_analysis_service(config, client=fake))
    return TestClient(app)


def _upload(image_bytes, content_type="image/png"):
    return {"image": ("art.png", image_bytes, content_type)}


def test_missing_image_returns_400_without_model_call(config):
    fake = FakeOpenAIClient(reply=fenced_reply(FULL_PAYLOAD))
    client = _client(config, fake)

    response = client.post("/api/analyze-artwork", data={"title": "no file"})

    assert response.status_code == 400
    assert response.json() == {"error": "No image file provided"}
    assert fake.calls == []


def test_wrong_field_name_returns_400(config, image_bytes):
    fake = FakeOpenAIClient(reply=fenced_reply(FULL_PAYLOAD))
    client = _client(config, fake)

    response = client.post("/api/analyze-artwork", files={"photo": ("art.png", image_bytes, "image/png")})

    assert response.status_code == 400
    assert fake.calls == []


def test_empty_file_returns_400(config):
    fake = FakeOpenAIClient(reply=fenced_reply(FULL_PAYLOAD))
    client = _client(config, fake)

    response = client.post("/api/analyze-artwork", files=_upload(b""))

    assert response.status_code == 400
    assert response.json() == {"error": "No image file provided"}


def test_successful_analysis_shape(config, image_bytes):
    fake = FakeOpenAIClient(reply=fenced_reply(FULL_PAYLOAD))
    client = _client(config, fake)

    response = client.post("/api/analyze-artwork", files=_upload(image_bytes))

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"imageUrl", "artistInfo", "colorPalette", "analysis", "replicationGuide"}
    assert body["imageUrl"].startswith("data:image/png;base64,")
    assert body["artistInfo"]["name"] == "Claude Monet"
    assert body["colorPalette"]["dominantColor"] == body["colorPalette"]["colors"][0]
    assert body["replicationGuide"]["difficulty"] == "Intermediate"
    assert len(fake.calls) == 1
    sent_url = fake.calls[0]["messages"][0]["content"][1]["image_url"]["url"]
    assert sent_url == body["imageUrl"]


def test_prose_reply_still_returns_200(config, image_bytes):
    prose = "This looks like a watercolor landscape but I cannot be sure."
    client = _client(config, FakeOpenAIClient(reply=prose))

    response = client.post("/api/analyze-artwork", files=_upload(image_bytes))

    assert response.status_code == 200
    body = response.json()
    assert body["artistInfo"]["name"] == "Unknown Artist"
    assert body["artistInfo"]["description"] == prose
    assert body["replicationGuide"]["difficulty"] == "Beginner"
    assert body["colorPalette"]["colors"] == list(extract_color_palette(image_bytes).colors)


def test_unsupported_difficulty_is_replaced(config, image_bytes):
    payload = dict(FULL_PAYLOAD, replicationGuide={"difficulty": "Expert"})
    client = _client(config, FakeOpenAIClient(reply=fenced_reply(payload)))

    response = client.post("/api/analyze-artwork", files=_upload(image_bytes))

    assert response.json()["replicationGuide"]["difficulty"] == "Beginner"


def test_transport_failure_returns_500(config, image_bytes):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    fake = FakeOpenAIClient(error=openai.APIConnectionError(request=request))
    client = _client(config, fake)

    response = client.post("/api/analyze-artwork", files=_upload(image_bytes))

    assert response.status_code == 500
    assert response.json()["error"].startswith("Failed to analyze artwork: ")
    assert len(fake.calls) == 1


def test_missing_api_key_returns_500(config, image_bytes):
    config.openai.api_key = None
    app = create_app(config, analysis_service=build_analysis_service(config))

    response = TestClient(app).post("/api/analyze-artwork", files=_upload(image_bytes))

    assert response.status_code == 500
    assert response.json()["error"].startswith("Failed to analyze artwork")


def test_unexpected_error_hides_details(config, image_bytes, monkeypatch):
    service = build_analysis_service(config, client=FakeOpenAIClient(reply="{}"))

    def boom(image):
        raise RuntimeError("secret internals")

    monkeypatch.setattr(service, "analyze", boom)
    client = TestClient(create_app(config, analysis_service=service))

    response = client.post("/api/analyze-artwork", files=_upload(image_bytes))

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to analyze artwork"}


@pytest.mark.parametrize("content_type", ["image/webp", "application/octet-stream"])
def test_unexpected_mime_type_is_not_rejected(config, image_bytes, content_type):
    client = _client(config, FakeOpenAIClient(reply=fenced_reply(FULL_PAYLOAD)))

    response = client.post("/api/analyze-artwork", files=_upload(image_bytes, content_type))

    assert response.status_code == 200
    assert response.json()["imageUrl"].startswith(f"data:{content_type};base64,")


def test_health_endpoint(config):
    client = _client(config, FakeOpenAIClient(reply="{}"))

    response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["is_healthy"] is True
    assert body["service"]["name"] == "artwork_analysis_service"
    assert body["service"]["status"] == "ready"


def test_deeply_nested_reply_still_returns_200(config, image_bytes):
    depth = 3000
    reply = "```json\n" + '{"a":' * depth + "1" + "}" * depth + "\n```"
    client = _client(config, FakeOpenAIClient(reply=reply))

    response = client.post("/api/analyze-artwork", files=_upload(image_bytes))

    assert response.status_code == 200
    body = response.json()
    assert body["artistInfo"]["name"] == "Unknown Artist"
    assert body["replicationGuide"]["difficulty"] == "Beginner"


def test_health_endpoint_without_api_key_is_unhealthy(config):
    config.openai.api_key = None
    app = create_app(config, analysis_service=build_analysis_service(config))

    response = TestClient(app).get("/api/health")

    assert response.status_code == 503
    body = response.json()
    assert body["is_healthy"] is False
    assert body["details"]["openai"]["details"]["client_initialized"] is False


def test_cors_allows_any_origin_without_credentials(config):
    client = _client(config, FakeOpenAIClient(reply="{}"))

    response = client.get("/api/health", headers={"Origin": "http://gallery.test"})

    assert response.headers["access-control-allow-origin"] == "*"
    assert "access-control-allow-credentials" not in response.headers
