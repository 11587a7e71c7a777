import logging

from composite_frame._log import UTCColoredFormatter, setup_logging


def test_setup_logging_single_handler():
    root = logging.getLogger()
    prev_handlers, prev_level = root.handlers[:], root.level
    try:
        setup_logging('debug', silence=('noisy.lib',))
        setup_logging('info')

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, UTCColoredFormatter)
        assert root.level == logging.INFO
        assert logging.getLogger('noisy.lib').level == logging.WARNING

    finally:
        root.handlers[:] = prev_handlers
        root.setLevel(prev_level)


def test_utc_timestamps():
    formatter = UTCColoredFormatter('%(asctime)s %(message)s')
    record = logging.LogRecord('t', logging.INFO, __file__, 1, 'hello', None, None)
    record.created = 0.0

    assert formatter.format(record).startswith('1970-01-01T00:00:00Z')
