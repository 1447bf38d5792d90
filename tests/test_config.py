from pathlib import Path

from result_api.config import Settings


def test_defaults(monkeypatch):
    for var in ("ASSETS_BASE_URL", "REMOTE_INDEX_URL", "FAST_LOOKBACK_DAYS", "ENVIRONMENT", "ENV"):
        monkeypatch.delenv(var, raising=False)
    s = Settings.from_env()
    assert s.fast_lookback_days == 7
    assert s.remote_index_enabled is False
    assert s.environment == "stage"
    assert s.images_dir == Path("results")


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("REMOTE_INDEX_URL", " https://example.org/api/get-images ")
    monkeypatch.setenv("FAST_LOOKBACK_DAYS", "14")
    monkeypatch.setenv("PROBE_TIMEOUT", "0.7")
    monkeypatch.setenv("SCAN_BATCH_SIZE", "0")
    monkeypatch.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = Settings.from_env()
    assert s.remote_index_url == "https://example.org/api/get-images"
    assert s.remote_index_enabled
    assert s.fast_lookback_days == 14
    assert s.probe_timeout == 0.7
    assert s.scan_batch_size == 1
    assert s.allowed_origins == {"https://a.example", "https://b.example"}
    assert s.log_level == "DEBUG"


def test_malformed_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("FAST_LOOKBACK_DAYS", "a week")
    monkeypatch.setenv("PROBE_TIMEOUT", "fast")
    s = Settings.from_env()
    assert s.fast_lookback_days == 7
    assert s.probe_timeout == 1.0
