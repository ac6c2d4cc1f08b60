import logging
from pathlib import Path

from loguru import logger

from agentdock.shared.log import setup_logging


def test_file_sink_receives_loguru_and_stdlib_records(tmp_path: Path) -> None:
    log_file = tmp_path / "agentdock.log"
    try:
        setup_logging("info", log_file)
        logger.info("session {} started", "s-1")
        logging.getLogger("agentdock.test").warning("stdlib says hi")
        logger.debug("below the configured level")
    finally:
        logger.remove()

    content = log_file.read_text(encoding="utf-8")
    assert "session s-1 started" in content
    assert "stdlib says hi" in content
    assert "below the configured level" not in content


def test_noisy_libraries_are_quieted() -> None:
    try:
        setup_logging("DEBUG")
    finally:
        logger.remove()

    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("grpc").level == logging.WARNING
