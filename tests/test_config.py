from chalo_ai.config import Settings


def test_defaults(monkeypatch):
    for name in ("API_PORT", "SESSION_BACKEND", "OPENAI_API_KEY", "CORS_ORIGINS", "MAX_DEAL_RESULTS"):
        monkeypatch.delenv(name, raising=False)
    settings = Settings()
    assert settings.API_PORT == 3000
    assert settings.SESSION_BACKEND == "memory"
    assert settings.MAX_DEAL_RESULTS == 10
    assert not settings.use_openai
    assert settings.cors_origins_list == ["*"]
    assert settings.DEALS_FILE.endswith("deals.json")


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("API_PORT", "8080")
    monkeypatch.setenv("SESSION_BACKEND", "Redis")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.setenv("REDIS_HOST", "cache")
    monkeypatch.delenv("DEALS_FILE", raising=False)

    settings = Settings()
    assert settings.API_PORT == 8080
    assert settings.SESSION_BACKEND == "redis"
    assert settings.use_openai
    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
    assert settings.DEALS_FILE == str(tmp_path / "deals" / "deals.json")
    assert settings.redis_url == "redis://cache:6379/0"
