import logging
import os

from shared.logging.logging_setup import ColoredFormatter, ColorLogger, TenantFormatter, setup_logging


def _record(level: int, msg: str, *args) -> logging.LogRecord:
    return logging.LogRecord("tenant_rag", level, __file__, 1, msg, args, None)


def test_formatter_marks_warnings_and_errors():
    formatter = TenantFormatter("UTC", fmt="%(levelname)s %(message)s")

    assert formatter.format(_record(logging.INFO, "created %s", "c")) == "INFO created c"
    assert formatter.format(_record(logging.WARNING, "slow")) == "WARNING ⚠️ slow"
    assert formatter.format(_record(logging.ERROR, "down")) == "ERROR ⛔ down"


def test_formatter_leaves_shared_record_untouched():
    record = _record(logging.WARNING, "size %d", 4)

    TenantFormatter("UTC", fmt="%(message)s").format(record)

    assert record.msg == "size %d"
    assert record.args == (4,)


def test_colored_formatter_uses_record_color():
    formatter = ColoredFormatter("UTC", fmt="%(message)s")
    record = _record(logging.INFO, "ready")
    record.color = "green"

    assert formatter.format(record) == "\033[32mready\033[0m"
    assert formatter.format(_record(logging.INFO, "plain")) == "plain"


def test_color_logger_passes_color_as_extra(caplog):
    logger = ColorLogger(logging.getLogger("tenant_rag.color_test"))

    with caplog.at_level(logging.INFO, logger="tenant_rag.color_test"):
        logger.info("collection %s created", "c1", color="green")

    assert caplog.records[0].getMessage() == "collection c1 created"
    assert caplog.records[0].color == "green"


def test_setup_logging_writes_to_root_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("ROOT_DIR", str(tmp_path))
    monkeypatch.setenv("TIMEZONE", "UTC")
    monkeypatch.setenv("LOG_LEVEL", "info")
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level

    try:
        logger = setup_logging()
        logger.info("hello from the test")
        for handler in root.handlers:
            handler.flush()

        assert isinstance(logger, ColorLogger)
        with open(os.path.join(tmp_path, "logs", "app.log"), encoding="utf-8") as handle:
            assert "hello from the test" in handle.read()
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
