"""Observability: logging configuration for the nursery logger tree."""

from .logging import ROOT_LOGGER, JsonFormatter, configure_logging

__all__ = ["ROOT_LOGGER", "JsonFormatter", "configure_logging"]
