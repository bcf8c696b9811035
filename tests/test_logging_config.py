import logging

import pytest

from shared.logging_config import ACCESS_LOGGERS, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    access_levels = {name: logging.getLogger(name).level for name in ACCESS_LOGGERS}
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    for name, access_level in access_levels.items():
        logging.getLogger(name).setLevel(access_level)


def test_setup_logging_writes_component_prefix(tmp_path, restore_logging):
    log_file = tmp_path / "logs" / "web.log"

    logger = setup_logging("web", level="INFO", log_file=str(log_file))
    logger.warning("disk almost full")
    for handler in logging.getLogger().handlers:
        handler.flush()

    text = log_file.read_text()
    assert "[WEB] INFO - WEB logging initialized (level=INFO)" in text
    assert "[WEB] WARNING - disk almost full" in text


def test_access_logs_quiet_unless_debug(restore_logging):
    setup_logging("web", level="INFO")
    assert logging.getLogger("werkzeug").level == logging.WARNING

    setup_logging("web", level=logging.DEBUG)
    assert logging.getLogger("werkzeug").level == logging.DEBUG


def test_unknown_level_name_falls_back_to_info(restore_logging):
    setup_logging("admin", level="chatty")
    assert logging.getLogger().level == logging.INFO
