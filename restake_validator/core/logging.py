"""Simple console logging utilities."""

from __future__ import annotations

import logging
from typing import Any

from .core_constants import LOG_DATE_FORMAT


class SimpleLogger:
    """Small wrapper around :mod:`logging` used by the validation workflow."""

    def __init__(self, name: str = "restake_validator") -> None:
        self._logger = logging.getLogger(name)
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                "%(asctime)s - %(levelname)s - %(message)s",
                datefmt=LOG_DATE_FORMAT,
            )
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)
        self.configure()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def configure(self, level: int = logging.INFO) -> None:
        self._logger.setLevel(level)

    @property
    def level(self) -> int:
        return self._logger.level

    # ------------------------------------------------------------------
    # Basic logging methods
    # ------------------------------------------------------------------
    def debug(
        self,
        msg: str,
        source: str | None = None,
        payload: Any | None = None,
        **_: Any,
    ) -> None:
        self._logger.debug(self._format(msg, source, payload))

    def info(
        self,
        msg: str,
        source: str | None = None,
        payload: Any | None = None,
        **_: Any,
    ) -> None:
        self._logger.info(self._format(msg, source, payload))

    def warning(
        self,
        msg: str,
        source: str | None = None,
        payload: Any | None = None,
        **_: Any,
    ) -> None:
        self._logger.warning(self._format(msg, source, payload))

    def error(
        self,
        msg: str,
        source: str | None = None,
        payload: Any | None = None,
        **_: Any,
    ) -> None:
        self._logger.error(self._format(msg, source, payload))

    # Convenience aliases ------------------------------------------------
    def success(
        self,
        msg: str,
        source: str | None = None,
        payload: Any | None = None,
        **_: Any,
    ) -> None:
        self._logger.info(self._format(msg, source, payload))

    def banner(
        self,
        msg: str,
        source: str | None = None,
        payload: Any | None = None,
        **_: Any,
    ) -> None:
        banner_msg = f"==== {msg} ===="
        self._logger.info(self._format(banner_msg, source, payload))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _format(self, msg: str, source: str | None, payload: Any | None = None) -> str:
        base = f"[{source}] {msg}" if source else msg
        if payload is not None:
            base = f"{base} {payload}"
        return base


# Public API ---------------------------------------------------------------
log = SimpleLogger()


def configure_console_log(debug: bool = False) -> None:
    """Configure the console logger."""
    level = logging.DEBUG if debug else logging.INFO
    log.configure(level)


__all__ = ["SimpleLogger", "log", "configure_console_log"]
