"""Structured JSON logging for the moderation console.

Request-scoped fields (request id, route, operator, report under action) live
in context variables so every log line emitted while handling a request carries
them without threading them through call signatures.
"""

from __future__ import annotations

import json
import logging
import random
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional

from devmatch.settings import settings

_LOGGER_NAME = "devmatch"

_CONTEXT: Dict[str, ContextVar[Optional[str]]] = {
	name: ContextVar(f"obs_{name}", default=None)
	for name in ("request_id", "route", "actor_id", "report_id")
}

# Matched as substrings of the lower-cased field name.
_REDACTED_FIELDS = ("token", "secret", "authorization", "password", "email", "body")

_MAX_STRING_LENGTH = 256
_MAX_COLLECTION_ITEMS = 10

_RECORD_ATTRIBUTES = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


def bind_context(**fields: Optional[str]) -> Dict[str, Token]:
	"""Bind request-scoped fields and return the tokens needed to undo it.

	``None`` values are skipped; unknown field names raise ``KeyError``.
	"""
	return {name: _CONTEXT[name].set(value) for name, value in fields.items() if value is not None}


def reset_context(tokens: Dict[str, Token]) -> None:
	for name, token in tokens.items():
		_CONTEXT[name].reset(token)


@contextmanager
def bound(**fields: Optional[str]) -> Iterator[None]:
	tokens = bind_context(**fields)
	try:
		yield
	finally:
		reset_context(tokens)


def current_request_id() -> Optional[str]:
	return _CONTEXT["request_id"].get()


def _context_snapshot() -> Dict[str, str]:
	return {name: var.get() for name, var in _CONTEXT.items() if var.get()}


def _clip(value: Any) -> Any:
	if isinstance(value, str) and len(value) > _MAX_STRING_LENGTH:
		return f"{value[:_MAX_STRING_LENGTH]}…"
	if isinstance(value, dict):
		items = list(value.items())
		clipped = {key: _scrub(key, nested) for key, nested in items[:_MAX_COLLECTION_ITEMS]}
		if len(items) > _MAX_COLLECTION_ITEMS:
			clipped["…"] = f"+{len(items) - _MAX_COLLECTION_ITEMS} keys"
		return clipped
	if isinstance(value, (list, tuple, set, frozenset)):
		items = [_clip(item) for item in value]
		if len(items) > _MAX_COLLECTION_ITEMS:
			return items[:_MAX_COLLECTION_ITEMS] + ["…"]
		return items
	return value


def _scrub(key: str, value: Any) -> Any:
	if any(marker in key.lower() for marker in _REDACTED_FIELDS):
		return "[redacted]"
	return _clip(value)


class JSONLogFormatter(logging.Formatter):
	"""One JSON object per line: service metadata, bound context, then extras."""

	def format(self, record: logging.LogRecord) -> str:  # noqa: A003 (match logging api)
		payload: Dict[str, Any] = {
			"ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
			"level": record.levelname.lower(),
			"msg": record.getMessage(),
			"logger": record.name,
			"service": settings.service_name,
			"env": settings.environment,
			"commit": settings.git_commit,
		}
		payload.update(_context_snapshot())
		if record.exc_info:
			payload["exc_info"] = self.formatException(record.exc_info)
		for key, value in vars(record).items():
			if key not in _RECORD_ATTRIBUTES:
				payload[key] = _scrub(key, value)
		return json.dumps(payload, separators=(",", ":"), default=str)


class InfoSamplingFilter(logging.Filter):
	"""Sample info-level records at ``LOG_SAMPLING_RATE_INFO``; other levels pass."""

	def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
		if record.levelno != logging.INFO:
			return True
		rate = max(0.0, min(1.0, settings.obs_log_sampling_rate_info))
		return rate >= 1.0 or random.random() < rate


def configure_logging() -> logging.Logger:
	"""Route the root logger through a single JSON stream handler."""
	handler = logging.StreamHandler()
	handler.setFormatter(JSONLogFormatter())
	handler.addFilter(InfoSamplingFilter())
	root = logging.getLogger()
	root.handlers.clear()
	root.addHandler(handler)
	root.setLevel(settings.obs_log_level)
	return logging.getLogger(_LOGGER_NAME)


def get_logger(name: Optional[str] = None) -> logging.Logger:
	return logging.getLogger(name or _LOGGER_NAME)
