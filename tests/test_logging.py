import logging

from app.core.logging import SessionContextFilter, bind_session


def _record():
    return logging.LogRecord("app", logging.INFO, __file__, 1, "hello", None, None)


def test_records_carry_service_and_bound_session():
    log_filter = SessionContextFilter("tutor-test")

    bind_session("s42")
    record = _record()
    assert log_filter.filter(record) is True

    assert record.service == "tutor-test"
    assert record.session_id == "s42"
