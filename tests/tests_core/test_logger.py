"""
==============================================
Pytest suite for core/logger.py
==============================================

Covers module logger lookup, root handler setup (console and file) and the
colored console formatter.

How to Execute:
---------------
All tests:          python -m pytest tests/tests_core/test_logger.py -v
"""

import logging

import pytest

from core.logger import DATE_FORMAT, LOG_FORMAT, ColoredFormatter, get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    """Put the root logger's handlers and level back after a test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
def test_get_logger_returns_named_logger():
    logger = get_logger('drivers.mysql')

    assert logger is logging.getLogger('drivers.mysql')


@pytest.mark.unit
def test_get_logger_level_override():
    logger = get_logger('tests.level_override', level='warning')

    assert logger.level == logging.WARNING


@pytest.mark.unit
def test_setup_logging_console_only(restore_root_logger):
    setup_logging(log_level='DEBUG', use_colors=False)

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], logging.StreamHandler)
    assert not isinstance(root.handlers[0].formatter, ColoredFormatter)


@pytest.mark.unit
def test_setup_logging_colored_console(restore_root_logger):
    setup_logging(log_level='INFO', use_colors=True)

    assert isinstance(restore_root_logger.handlers[0].formatter, ColoredFormatter)


@pytest.mark.integration
def test_setup_logging_writes_file(restore_root_logger, tmp_path):
    setup_logging(
        log_level='INFO',
        log_file='datamage.log',
        log_dir=str(tmp_path / 'logs'),
        console_output=False
    )

    get_logger('tests.file_output').info('SELECT 1 [ ]')
    for handler in restore_root_logger.handlers:
        handler.flush()

    content = (tmp_path / 'logs' / 'datamage.log').read_text(encoding='utf-8')
    assert 'tests.file_output - INFO - SELECT 1' in content


@pytest.mark.unit
def test_colored_formatter_leaves_record_untouched():
    formatter = ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    record = logging.makeLogRecord({'name': 'sql', 'levelname': 'ERROR', 'levelno': 40, 'msg': 'boom'})

    output = formatter.format(record)

    assert '\033[31mERROR\033[0m' in output
    assert record.levelname == 'ERROR'


@pytest.mark.edge_case
def test_colored_formatter_unknown_level():
    formatter = ColoredFormatter('%(levelname)s %(message)s')
    record = logging.makeLogRecord({'levelname': 'TRACE', 'msg': 'x'})

    assert formatter.format(record) == 'TRACE x'
