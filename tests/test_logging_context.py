"""Tests for conversation-id log correlation."""

import io
import logging

from salon_booking.logging_context import (
    NO_CONVERSATION,
    build_log_handler,
    conversation_context,
)
from tests.conftest import PHONE, TENANT, send


def make_record(name: str = "salon_booking.test") -> logging.LogRecord:
    return logging.LogRecord(name, logging.INFO, __file__, 1, "hello", None, None)


class TestConversationContext:
    def test_handler_stamps_current_id(self):
        stream = io.StringIO()
        handler = build_log_handler(stream)
        with conversation_context("salon-1:+91***10"):
            handler.handle(make_record())
        assert "[salon-1:+91***10]: hello" in stream.getvalue()

    def test_id_resets_after_block(self):
        stream = io.StringIO()
        handler = build_log_handler(stream)
        with conversation_context("salon-1:abc"):
            pass
        handler.handle(make_record())
        assert f"[{NO_CONVERSATION}]: hello" in stream.getvalue()

    def test_nested_blocks_restore_outer_id(self):
        stream = io.StringIO()
        handler = build_log_handler(stream)
        with conversation_context("outer"):
            with conversation_context("inner"):
                pass
            handler.handle(make_record())
        assert "[outer]" in stream.getvalue()


class TestFlowLogging:
    def test_store_records_carry_conversation_id(self, flow):
        stream = io.StringIO()
        handler = build_log_handler(stream)
        package_logger = logging.getLogger("salon_booking")
        previous_level = package_logger.level
        package_logger.addHandler(handler)
        package_logger.setLevel(logging.INFO)
        try:
            for text in ("book", "haircut", "19/10/2026", "10:00", "Priya", "yes"):
                send(flow, text)
        finally:
            package_logger.removeHandler(handler)
            package_logger.setLevel(previous_level)

        lines = stream.getvalue().splitlines()
        inserted = [line for line in lines if "Booking inserted" in line]
        assert len(inserted) == 1
        assert f"[{TENANT}:+91***10]" in inserted[0]
        assert PHONE not in stream.getvalue()
