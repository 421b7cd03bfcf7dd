from artlens.app.core.app_factory import ApplicationFactory, get_application, reset_application


def test_create_application_builds_client(config):
    config.api_url = "http://example.test/api/analyze-artwork"
    config.client_timeout = 30.0
    config.camera.jpeg_quality = 90

    context = ApplicationFactory.create_application(config)

    assert context.analysis_client.endpoint_url == "http://example.test/api/analyze-artwork"
    assert context.analysis_client.timeout == 30.0
    assert context.camera_settings.jpeg_quality == 90
    assert context.camera_settings.facing_mode == "environment"


def test_get_application_is_cached(monkeypatch):
    monkeypatch.setenv("ARTLENS_LOG_TO_FILE", "false")
    reset_application()
    try:
        assert get_application() is get_application()
    finally:
        reset_application()
