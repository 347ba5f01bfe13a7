"""Injectable logging capability shared by the app, agents, and debate manager.

A `DebateLogger` is created once by the process entry point (`create_app`)
and handed to every component that needs it. Components constructed without
one get a console-only logger of their own.
"""
from __future__ import annotations

import json
import logging
import traceback
from pathlib import Path
from typing import Any, Optional


_FORMAT = "[%(levelname)s] %(asctime)s - %(message)s"
_PROJECT_LOGGER = "debate_ai"


class DebateLogger:
    """Thin wrapper over a named `logging.Logger` with structured payloads.

    Parameters:
        name: Logger name (e.g., "debate_ai").
        log_file: Optional path of a debug log file; created on demand.
    """

    def __init__(self, name: str = "debate_ai", log_file: Optional[str] = None) -> None:
        self._logger = logging.getLogger(name)
        # Console output lives on the project logger; component loggers propagate to it
        owner = logging.getLogger(_PROJECT_LOGGER) if name.split(".")[0] == _PROJECT_LOGGER else self._logger
        if not owner.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(_FORMAT))
            owner.addHandler(handler)
            owner.setLevel(logging.INFO)
        self.log_file: Optional[Path] = Path(log_file) if log_file else None
        self._file_handler: Optional[logging.FileHandler] = None
        if self.log_file is not None:
            self._attach_file_handler()

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _attach_file_handler(self) -> None:
        assert self.log_file is not None
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        for h in self._logger.handlers:
            if isinstance(h, logging.FileHandler) and Path(h.baseFilename) == self.log_file.resolve():
                self._file_handler = h
                return
        handler = logging.FileHandler(self.log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(_FORMAT))
        self._logger.addHandler(handler)
        self._file_handler = handler

    def clear_logs(self) -> None:
        """Truncate the debug log file (no-op without one)."""
        if self.log_file is None:
            return
        if self._file_handler is not None:
            self._file_handler.flush()
        self.log_file.parent.mkdir(parents=True, exist_ok=True)
        self.log_file.write_text("", encoding="utf-8")
        self.log("INFO", "Log file cleared")

    def log(self, level: str, message: str, data: Any = None) -> None:
        lvl = logging.getLevelName(level.upper())
        if not isinstance(lvl, int):
            lvl = logging.INFO
        if data is not None:
            message = f"{message} | {_dump(data)}"
        self._logger.log(lvl, message)

    def log_request(
        self,
        method: str,
        url: str,
        status_code: int,
        duration_ms: float,
        data: Any = None,
    ) -> None:
        payload = {"status": status_code, "duration": f"{duration_ms:.1f}ms"}
        if data is not None:
            payload["data"] = data
        self.log("INFO", f"{method} {url}", payload)

    def log_error(self, error: BaseException, context: Any = None) -> None:
        payload = {
            "name": type(error).__name__,
            "message": str(error),
            "context": context,
        }
        if error.__traceback__ is not None:
            payload["stack"] = "".join(traceback.format_tb(error.__traceback__))
        self.log("ERROR", "Error occurred", payload)


def _dump(data: Any) -> str:
    try:
        return json.dumps(data, default=str)
    except (TypeError, ValueError):
        return repr(data)
