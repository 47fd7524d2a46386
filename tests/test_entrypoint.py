import json
import logging

import pytest

import todo_api.__main__ as entrypoint
from todo_api.generate_openapi import generate_openapi
from todo_api.logging_config import configure_logging
from todo_api.repositories import InMemoryRepository
from todo_api.settings import get_settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("PERSISTENCE_BACKEND", "SQLITE_DB_PATH", "HOST", "PORT", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    def test_defaults(self, clean_env):
        settings = get_settings()
        assert settings.persistence_backend == "sqlite"
        assert settings.sqlite_db_path == "todos.db"
        assert settings.host == "0.0.0.0"
        assert settings.port == 8080
        assert settings.log_level == "INFO"

    def test_overrides(self, clean_env):
        clean_env.setenv("PERSISTENCE_BACKEND", "Memory")
        clean_env.setenv("PORT", "9090")
        clean_env.setenv("LOG_LEVEL", "debug")
        settings = get_settings()
        assert settings.persistence_backend == "memory"
        assert settings.port == 9090
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("value", ["http", "0", "70000", ""])
    def test_invalid_port_falls_back(self, clean_env, value):
        clean_env.setenv("PORT", value)
        assert get_settings().port == 8080

    def test_unknown_backend_falls_back_to_sqlite(self, clean_env):
        clean_env.setenv("PERSISTENCE_BACKEND", "postgres")
        assert get_settings().persistence_backend == "sqlite"


class TestMain:
    @pytest.fixture
    def served(self, clean_env):
        calls = []
        clean_env.setattr(entrypoint, "configure_logging", lambda level: None)
        clean_env.setattr(entrypoint.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
        return calls

    def test_runs_server_on_configured_port(self, clean_env, served, caplog):
        clean_env.setenv("PERSISTENCE_BACKEND", "memory")
        clean_env.setenv("PORT", "9191")
        with caplog.at_level(logging.INFO, logger="todo_api"):
            entrypoint.main()

        assert len(served) == 1
        app, kwargs = served[0]
        assert isinstance(app.state.repository, InMemoryRepository)
        assert kwargs["port"] == 9191
        assert kwargs["host"] == "0.0.0.0"
        assert "Listening on 0.0.0.0:9191..." in caplog.text

    def test_storage_failure_is_fatal(self, clean_env, served, tmp_path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        clean_env.setenv("SQLITE_DB_PATH", str(blocker / "todos.db"))

        with pytest.raises(SystemExit) as exc_info:
            entrypoint.main()
        assert exc_info.value.code == 1
        assert served == []
        assert "cannot open sqlite storage" in caplog.text


class TestLogging:
    def test_unknown_level_falls_back_to_info(self):
        root = logging.getLogger()
        saved_level, saved_handlers = root.level, root.handlers[:]
        try:
            configure_logging("chatty")
            assert root.level == logging.INFO
            configure_logging("warning")
            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestOpenAPI:
    def test_writes_schema_with_todo_routes(self, tmp_path):
        out = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))
        with open(out, encoding="utf-8") as f:
            schema = json.load(f)
        assert "/todos" in schema["paths"]
        assert "/todos/{todo_id}" in schema["paths"]
        assert set(schema["paths"]["/todos/{todo_id}"]) == {"get", "put", "delete"}
        assert any(tag["name"] == "todos" for tag in schema["tags"])
