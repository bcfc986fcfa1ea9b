from src.api.settings import get_settings

ENV_VARS = [
    "PERSISTENCE_BACKEND",
    "SQLITE_DB_PATH",
    "CORS_ALLOW_ORIGINS",
    "LOG_LEVEL",
    "API_BASE_URL",
    "EDIT_DEBOUNCE_SECONDS",
    "HTTP_TIMEOUT_SECONDS",
]


def test_defaults(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    s = get_settings()
    assert s.persistence_backend == "memory"
    assert s.sqlite_db_path == "./data/tasks.db"
    assert s.cors_allow_origins == ["*"]
    assert s.log_level == "INFO"
    assert s.api_base_url == "http://localhost:8000"
    assert s.edit_debounce_seconds == 0.3
    assert s.http_timeout_seconds == 10.0


def test_overrides(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", " SQLite ")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
    monkeypatch.setenv("API_BASE_URL", "http://tasks.internal:9000/")
    monkeypatch.setenv("EDIT_DEBOUNCE_SECONDS", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = get_settings()
    assert s.persistence_backend == "sqlite"
    assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
    assert s.api_base_url == "http://tasks.internal:9000"
    assert s.edit_debounce_seconds == 0.0
    assert s.log_level == "DEBUG"


def test_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("PERSISTENCE_BACKEND", "postgres")
    monkeypatch.setenv("EDIT_DEBOUNCE_SECONDS", "soon")
    monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", "-1")
    s = get_settings()
    assert s.persistence_backend == "memory"
    assert s.edit_debounce_seconds == 0.3
    assert s.http_timeout_seconds == 10.0
