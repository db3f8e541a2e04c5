"""Tests for listora.core.logging_config — structured logging setup."""

import io
import json
import logging

from listora.config import AppEnv
from listora.core.logging_config import publish_log_context, setup_logging


def _capture_log_output(app_env: AppEnv, log_format: str = "auto", log_level: str = "INFO"):
    """Helper: set up logging and capture output from a stdlib logger."""
    setup_logging(app_env=app_env, log_level=log_level, log_format=log_format)

    # Replace the root handler's stream with a StringIO for capture
    stream = io.StringIO()
    root = logging.getLogger()
    for h in root.handlers:
        h.stream = stream

    return stream


def _is_json(output: str) -> bool:
    try:
        json.loads(output.strip())
        return True
    except (json.JSONDecodeError, ValueError):
        return False


class TestSetupLoggingRenderer:
    """Verify correct renderer is selected based on env and format."""

    def test_development_auto_uses_console(self):
        stream = _capture_log_output(AppEnv.DEVELOPMENT, "auto")
        logging.getLogger("test.dev.auto").info("hello dev")
        output = stream.getvalue()
        assert "hello dev" in output
        assert not _is_json(output)

    def test_production_auto_uses_json(self):
        stream = _capture_log_output(AppEnv.PRODUCTION, "auto")
        logging.getLogger("test.prod.auto").info("hello prod")
        parsed = json.loads(stream.getvalue().strip())
        assert parsed["event"] == "hello prod"
        assert parsed["level"] == "info"

    def test_explicit_json_overrides_dev(self):
        stream = _capture_log_output(AppEnv.DEVELOPMENT, "json")
        logging.getLogger("test.dev.json").info("forced json")
        parsed = json.loads(stream.getvalue().strip())
        assert parsed["event"] == "forced json"

    def test_explicit_console_overrides_prod(self):
        stream = _capture_log_output(AppEnv.PRODUCTION, "console")
        logging.getLogger("test.prod.console").info("forced console")
        output = stream.getvalue()
        assert "forced console" in output
        assert not _is_json(output)


class TestSetupLoggingLevel:
    """Verify root logger level is set correctly."""

    def test_sets_root_level_warning(self):
        setup_logging(app_env=AppEnv.DEVELOPMENT, log_level="WARNING")
        assert logging.getLogger().level == logging.WARNING

    def test_default_level_is_info(self):
        setup_logging(app_env=AppEnv.DEVELOPMENT)
        assert logging.getLogger().level == logging.INFO

    def test_unknown_level_falls_back_to_info(self):
        setup_logging(app_env=AppEnv.DEVELOPMENT, log_level="CHATTY")
        assert logging.getLogger().level == logging.INFO


class TestPublishLogContext:
    """Publish identifiers are attached to every line inside the block."""

    def test_context_fields_in_json_output(self):
        stream = _capture_log_output(AppEnv.PRODUCTION, "json")
        logger = logging.getLogger("listora.listers.ebay_lister")
        with publish_log_context(user_id="u-1", platform="ebay", sku="LISTORA-1"):
            logger.info("Publishing listing")
        parsed = json.loads(stream.getvalue().strip())
        assert parsed["user_id"] == "u-1"
        assert parsed["platform"] == "ebay"
        assert parsed["sku"] == "LISTORA-1"
        assert parsed["logger"] == "listora.listers.ebay_lister"

    def test_context_cleared_after_block(self):
        stream = _capture_log_output(AppEnv.PRODUCTION, "json")
        logger = logging.getLogger("test.context.cleared")
        with publish_log_context(user_id="u-2"):
            pass
        logger.info("outside")
        parsed = json.loads(stream.getvalue().strip())
        assert "user_id" not in parsed

    def test_none_fields_skipped(self):
        stream = _capture_log_output(AppEnv.PRODUCTION, "json")
        with publish_log_context(user_id="u-3", sku=None):
            logging.getLogger("test.context.none").info("partial")
        parsed = json.loads(stream.getvalue().strip())
        assert parsed["user_id"] == "u-3"
        assert "sku" not in parsed


class TestNoisyLoggers:
    """Verify noisy third-party loggers are quieted."""

    def test_sqlalchemy_engine_set_to_warning(self):
        setup_logging(app_env=AppEnv.DEVELOPMENT)
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

    def test_httpx_set_to_warning(self):
        setup_logging(app_env=AppEnv.DEVELOPMENT)
        assert logging.getLogger("httpx").level == logging.WARNING
