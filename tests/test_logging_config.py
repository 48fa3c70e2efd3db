import logging

from app.core.logging_config import REDACTED, sanitize_log_data, setup_logging


def test_sanitize_redacts_nested_secrets():
    data = {
        "email": "ama@example.com",
        "password": "secret123",
        "nested": {"resetToken": "abc", "count": 2},
        "items": [{"apiKey": "k"}, "plain"],
    }

    clean = sanitize_log_data(data)

    assert clean == {
        "email": "ama@example.com",
        "password": REDACTED,
        "nested": {"resetToken": REDACTED, "count": 2},
        "items": [{"apiKey": REDACTED}, "plain"],
    }
    assert data["password"] == "secret123"


def test_setup_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug", str(tmp_path / "logs"))

        assert root.level == logging.DEBUG
        assert (tmp_path / "logs" / "hirehaven.log").exists()
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
