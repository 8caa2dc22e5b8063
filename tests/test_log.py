import logging
from pathlib import Path

from clusterboot.logging.log import init_logging


def test_console_only_by_default():
    logger, log_path = init_logging()
    assert log_path is None
    assert logger.name == "clusterboot"
    assert [h.level for h in logger.handlers] == [logging.INFO]


def test_file_trace_when_log_dir_given(tmp_path: Path):
    logger, log_path = init_logging(log_dir=tmp_path / "logs", verbose=True)
    logger.debug("rendering aa:bb:cc:dd:ee:01")
    for h in logger.handlers:
        h.flush()
    assert log_path.parent == tmp_path / "logs"
    assert "rendering aa:bb:cc:dd:ee:01" in log_path.read_text()
    assert logging.DEBUG in [h.level for h in logger.handlers]


def test_reinit_replaces_handlers():
    init_logging()
    logger, _ = init_logging()
    assert len(logger.handlers) == 1
