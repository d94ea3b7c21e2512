import logging
from logging.handlers import RotatingFileHandler

from meridian.core.logger import LOG_LEVEL_ENV, configure_logging, resolve_level, setup_logger


class TestResolveLevel:
    def test_names_are_case_insensitive(self):
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level(" Warning ") == logging.WARNING

    def test_unknown_or_empty_name_gives_default(self):
        assert resolve_level("chatty") == logging.INFO
        assert resolve_level(None, logging.ERROR) == logging.ERROR


class TestSetupLogger:
    def test_writes_to_rotating_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        log_file = tmp_path / "logs" / "run.log"

        log = setup_logger("logger_test.file", str(log_file))
        log.info("hello")
        for handler in log.handlers:
            handler.flush()

        assert any(isinstance(h, RotatingFileHandler) for h in log.handlers)
        assert "| INFO     |" in log_file.read_text(encoding="utf-8")
        assert "hello" in log_file.read_text(encoding="utf-8")

    def test_level_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "ERROR")
        log = setup_logger("logger_test.env", str(tmp_path / "run.log"))
        assert log.level == logging.ERROR

    def test_repeated_setup_keeps_handlers(self, tmp_path):
        first = setup_logger("logger_test.repeat", str(tmp_path / "run.log"))
        second = setup_logger("logger_test.repeat", str(tmp_path / "other.log"))
        assert first is second
        assert len(second.handlers) == 2


class TestConfigureLogging:
    def test_applies_config_level(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        target = logging.getLogger("logger_test.config")
        target.setLevel(logging.INFO)

        configure_logging({"logging": {"level": "debug"}}, target)

        assert target.level == logging.DEBUG

    def test_environment_wins(self, monkeypatch):
        monkeypatch.setenv(LOG_LEVEL_ENV, "WARNING")
        target = logging.getLogger("logger_test.config_env")
        target.setLevel(logging.WARNING)

        configure_logging({"logging": {"level": "debug"}}, target)

        assert target.level == logging.WARNING

    def test_missing_section_leaves_level(self, monkeypatch):
        monkeypatch.delenv(LOG_LEVEL_ENV, raising=False)
        target = logging.getLogger("logger_test.config_none")
        target.setLevel(logging.ERROR)

        configure_logging({}, target)

        assert target.level == logging.ERROR
