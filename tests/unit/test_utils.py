"""
Unit Tests for Time Utilities and Logging Setup

Run with:
    pytest tests/unit/test_utils.py -v
"""

import logging
from datetime import datetime, timedelta, timezone

from core.logging import LOGGER_NAME, get_logger, set_log_level, setup_logging
from core.utils.time import current_utc_timestamp, datetime_to_timestamp, to_iso8601


class TestTimestamps:
    """Tests for datetime_to_timestamp and current_utc_timestamp"""

    def test_seconds(self):
        dt = datetime(2019, 5, 16, 13, 48, 6, 185000, tzinfo=timezone.utc)
        assert datetime_to_timestamp(dt) == 1558014486

    def test_milliseconds_are_exact(self):
        dt = datetime(2019, 5, 16, 13, 48, 6, 185000, tzinfo=timezone.utc)
        assert datetime_to_timestamp(dt, milliseconds=True) == 1558014486185

    def test_naive_is_utc(self):
        naive = datetime(2019, 5, 16, 13, 48, 6)
        aware = naive.replace(tzinfo=timezone.utc)
        assert datetime_to_timestamp(naive, milliseconds=True) == datetime_to_timestamp(aware, milliseconds=True)

    def test_other_timezone(self):
        sast = timezone(timedelta(hours=2))
        dt = datetime(2019, 5, 16, 15, 48, 6, 185000, tzinfo=sast)
        assert datetime_to_timestamp(dt, milliseconds=True) == 1558014486185

    def test_current_timestamp_is_close_to_now(self):
        before = datetime_to_timestamp(datetime.now(timezone.utc), milliseconds=True)
        now = current_utc_timestamp(milliseconds=True)
        assert 0 <= now - before < 5000


class TestIso8601:
    """Tests for to_iso8601"""

    def test_utc(self):
        dt = datetime(2019, 5, 7, 10, 55, 9, 949000, tzinfo=timezone.utc)
        assert to_iso8601(dt) == "2019-05-07T10:55:09.949Z"

    def test_converts_to_utc(self):
        dt = datetime(2019, 5, 7, 12, 55, 9, tzinfo=timezone(timedelta(hours=2)))
        assert to_iso8601(dt) == "2019-05-07T10:55:09.000Z"


class TestLogging:
    """Tests for the valr logger setup"""

    def test_get_logger_is_child(self):
        log = get_logger("exchanges.valr.api_client")
        assert log.name == "valr.exchanges.valr.api_client"

    def test_setup_does_not_stack_handlers(self):
        setup_logging("DEBUG")
        setup_logging("INFO")

        logger = logging.getLogger(LOGGER_NAME)
        ours = [h for h in logger.handlers if getattr(h, "_valr_handler", False)]
        assert len(ours) == 1
        assert logger.propagate is False

    def test_set_log_level(self):
        logger = logging.getLogger(LOGGER_NAME)
        original = logger.level
        try:
            set_log_level("warning")
            assert logger.level == logging.WARNING
        finally:
            logger.setLevel(original)
