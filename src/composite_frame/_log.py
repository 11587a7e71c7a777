'''
# Logging helpers

The library only emits records through per module loggers (registry shape
creation / reuse, transform column replacement), all at DEBUG. Nothing here
runs on import: applications and debugging sessions opt in with
`setup_logging()`, which honours COMPOSITE_FRAME_LOGLEVEL.

    setup_logging('debug', silence=('polars',))

'''
import logging
import time
from typing import Iterable

from colorlog import ColoredFormatter

from composite_frame.config import load_settings


class UTCColoredFormatter(ColoredFormatter):
    '''
    A ColoredFormatter that uses UTC for timestamps
    and formats them in ISO8601 with a trailing 'Z'.

    '''

    # switch time converter to UTC
    converter = time.gmtime

    def formatTime(self, record, datefmt=None):
        if datefmt:
            return super().formatTime(record, datefmt)

        ct = self.converter(record.created)
        t = time.strftime('%Y-%m-%dT%H:%M:%S', ct)
        return f'{t}Z'


def setup_logging(
    loglevel: str | None = None,
    silence: Iterable[str] = (),
) -> None:
    '''
    Install a single colored stream handler on the root logger, `loglevel`
    defaults to the COMPOSITE_FRAME_LOGLEVEL setting.

    '''
    if loglevel is None:
        loglevel = load_settings().loglevel

    for noisy in silence:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    formatter = UTCColoredFormatter(
        '%(asctime)s %(log_color)s%(levelname)s%(reset)s %(name)s: %(message)s',
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'bold_red',
        },
    )

    root = logging.getLogger()

    # avoid duplicates if called twice
    if root.handlers:
        root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(loglevel.upper())
