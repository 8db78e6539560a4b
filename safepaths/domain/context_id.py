"""Caller context ID management using contextvars."""

import contextvars
import logging
import uuid
from typing import Any, MutableMapping, Optional

ROOT_LOGGER_NAME = "safepaths"

_context_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "context_id", default=None
)


def generate_context_id() -> str:
    """Generate a new context ID using UUID4."""
    return str(uuid.uuid4())


def get_context_id() -> Optional[str]:
    """Retrieve the current context ID."""
    return _context_id_var.get()


def set_context_id(context_id: str) -> None:
    """Tag subsequent log records in this context with the given ID."""
    _context_id_var.set(context_id)


def clear_context_id() -> None:
    """Remove the context ID from the current context."""
    _context_id_var.set(None)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that injects context_id and component into log records."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        if "extra" not in kwargs:
            kwargs["extra"] = {}
        else:
            kwargs["extra"] = dict(kwargs["extra"])

        context_id = get_context_id()
        kwargs["extra"]["context_id"] = context_id if context_id is not None else "-"

        logger_name = self.logger.name
        prefix = ROOT_LOGGER_NAME + "."
        if logger_name.startswith(prefix):
            component = logger_name[len(prefix) :]
        else:
            component = logger_name
        kwargs["extra"]["component"] = component

        return msg, kwargs


def component_logger(component: str) -> ContextLoggerAdapter:
    """Return an adapter bound to ``safepaths.<component>``."""
    return ContextLoggerAdapter(
        logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}"), {}
    )
