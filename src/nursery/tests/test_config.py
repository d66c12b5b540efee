"""Tests for options, settings and logging configuration."""

from __future__ import annotations

import io
import json
import logging

import pytest
from pydantic import ValidationError

from nursery import (
    NurseryConfig,
    background,
    clear_settings_cache,
    configure_logging,
    get_settings,
    with_cancel,
    with_context,
    with_error_handler,
    with_max_goroutines,
    with_max_tasks,
)
from nursery.observability import ROOT_LOGGER
from nursery.runtime import resolve_config


@pytest.fixture(autouse=True)
def clean_settings() -> object:
    """Reset cached settings and nursery log handlers around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


# ═════════════════════════════════════════════════════════════════════════════
# Options
# ═════════════════════════════════════════════════════════════════════════════


def test_defaults() -> None:
    config = resolve_config([])
    assert config.context is background()
    assert config.max_goroutines is None
    assert config.error_handler is None
    assert config.thread_name_prefix == "nursery-"


def test_options_applied() -> None:
    ctx, cancel = with_cancel(background())
    handler = print
    config = resolve_config([with_context(ctx), with_max_goroutines(3), with_error_handler(handler)])
    assert config.context is ctx
    assert config.max_goroutines == 3
    assert config.error_handler is handler
    cancel()


def test_later_option_wins() -> None:
    config = resolve_config([with_max_goroutines(2), with_max_tasks(5)])
    assert config.max_goroutines == 5


@pytest.mark.parametrize("n", [0, -3])
def test_max_goroutines_must_be_positive(n: int) -> None:
    with pytest.raises(ValidationError):
        with_max_goroutines(n)


def test_with_context_rejects_non_context() -> None:
    with pytest.raises(TypeError):
        with_context(object())  # type: ignore[arg-type]


def test_with_error_handler_rejects_non_callable() -> None:
    with pytest.raises(TypeError):
        with_error_handler(None)  # type: ignore[arg-type]


def test_config_is_frozen() -> None:
    config = NurseryConfig()
    with pytest.raises(ValidationError):
        config.max_goroutines = 4  # type: ignore[misc]


# ═════════════════════════════════════════════════════════════════════════════
# Settings
# ═════════════════════════════════════════════════════════════════════════════


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NURSERY_DEFAULT_MAX_GOROUTINES", "3")
    monkeypatch.setenv("NURSERY_THREAD_NAME_PREFIX", "worker-")
    monkeypatch.setenv("NURSERY_LOG_LEVEL", "debug")
    clear_settings_cache()
    
    settings = get_settings()
    assert settings.default_max_goroutines == 3
    assert settings.logging.level == "DEBUG"
    
    config = resolve_config([])
    assert config.max_goroutines == 3
    assert config.thread_name_prefix == "worker-"
    assert resolve_config([with_max_goroutines(1)]).max_goroutines == 1


def test_settings_cached() -> None:
    assert get_settings() is get_settings()


# ═════════════════════════════════════════════════════════════════════════════
# Logging
# ═════════════════════════════════════════════════════════════════════════════


def test_configure_logging_json() -> None:
    out = io.StringIO()
    configure_logging(level="DEBUG", format="json", output=out)
    
    logging.getLogger("nursery.test").info("hello %s", "world")
    
    entry = json.loads(out.getvalue().strip())
    assert entry["event"] == "hello world"
    assert entry["level"] == "info"
    assert entry["logger"] == "nursery.test"


def test_configure_logging_text_respects_level() -> None:
    out = io.StringIO()
    configure_logging(level="WARNING", format="text", output=out)
    
    log = logging.getLogger("nursery.test")
    log.info("quiet")
    log.warning("loud")
    
    assert "quiet" not in out.getvalue()
    assert "[WARNING] nursery.test" in out.getvalue()


def test_configure_logging_replaces_handler() -> None:
    configure_logging(output=io.StringIO())
    configure_logging(output=io.StringIO())
    assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1


def test_configure_logging_unknown_format() -> None:
    with pytest.raises(ValueError):
        configure_logging(format="yaml")  # type: ignore[arg-type]
