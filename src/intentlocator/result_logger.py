from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from .models import ElementDescriptor, LocatorLogDetail, Role

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


class ResolvedElementLogger(Protocol):
    detail: LocatorLogDetail

    def log_resolved_element(
        self,
        target: str,
        role: Role | None,
        xpath: str | None,
        css: str | None,
        descriptor: ElementDescriptor | None,
    ) -> None: ...


def build_logger(name: str = "intentlocator.resolve", log_file: str | Path | None = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.INFO)
    logger.propagate = False
    if log_file:
        try:
            path = Path(log_file).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)
            return logger
        except OSError:
            # Fall through to stderr when the file cannot be opened.
            pass

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)
    return logger


class LoggingResolvedElementLogger:
    """Write one INFO record per resolved element."""

    def __init__(
        self,
        detail: LocatorLogDetail | None = LocatorLogDetail.BOTH,
        logger: logging.Logger | None = None,
    ) -> None:
        self.detail = detail or LocatorLogDetail.NONE
        self.logger = logger or logging.getLogger("intentlocator.resolve")

    def log_resolved_element(
        self,
        target: str,
        role: Role | None,
        xpath: str | None,
        css: str | None,
        descriptor: ElementDescriptor | None,
    ) -> None:
        parts = [f"intent='{target}'", f"role={role.name if role else None}"]
        if self.detail.includes_xpath:
            parts.append(f"xpath={xpath}")
        if self.detail.includes_css:
            parts.append(f"css={css}")
        if descriptor is not None:
            parts.append(f"id={descriptor.id or None}")
            parts.append(f"name={descriptor.name or None}")
        self.logger.info("[intentlocator] %s", ", ".join(parts))
