import logging

from clinic_scheduler.core.logger import LOGGER_NAME, setup_logging


def test_setup_logging_is_idempotent():
    first = setup_logging()
    second = setup_logging()
    assert first is second
    assert first.name == LOGGER_NAME
    assert len(second.handlers) == 1


def test_setup_logging_applies_level():
    try:
        logger = setup_logging("debug")
        assert logger.level == logging.DEBUG
        assert logger.handlers[0].level == logging.DEBUG

        logger = setup_logging("not-a-level")
        assert logger.level == logging.INFO
    finally:
        setup_logging("INFO")


def test_branch_field_has_default():
    logger = setup_logging()
    record = logger.makeRecord(LOGGER_NAME, logging.INFO, __file__, 1, "booked", None, None)
    formatted = logger.handlers[0].format(record)
    assert "[branch=-]" in formatted
