"""Per-conversation log correlation.

``handle_message`` runs inside ``conversation_context`` so every record
emitted while it runs, from any salon_booking module, carries the same
``conversation_id``. The id is stamped by a handler-level filter, so
module loggers stay plain ``logging.getLogger``.

Usage:
    logging.basicConfig(handlers=[build_log_handler()])
    with conversation_context("salon-1:+91***10"):
        logger.info("Processing message")
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import IO, Iterator, Optional

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s [%(conversation_id)s]: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
NO_CONVERSATION = "-"

_conversation_id: ContextVar[str] = ContextVar("conversation_id", default=NO_CONVERSATION)


@contextmanager
def conversation_context(conversation_id: str) -> Iterator[None]:
    """Tag log records with ``conversation_id`` until the block exits."""
    token = _conversation_id.set(conversation_id)
    try:
        yield
    finally:
        _conversation_id.reset(token)


class ConversationIdFilter(logging.Filter):
    """Injects conversation_id into every record the handler emits."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.conversation_id = _conversation_id.get()  # type: ignore[attr-defined]
        return True


def build_log_handler(stream: Optional[IO[str]] = None) -> logging.Handler:
    """Stream handler whose format includes the conversation id."""
    handler = logging.StreamHandler(stream)
    handler.addFilter(ConversationIdFilter())
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    return handler
