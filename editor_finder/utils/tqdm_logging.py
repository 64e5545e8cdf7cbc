"""
Logging handler that cooperates with tqdm progress bars.
"""

import logging
import sys
from typing import TextIO

from tqdm import tqdm


class TqdmLoggingHandler(logging.Handler):
    """
    Write log records through ``tqdm.write()``.

    Log lines then appear above an active progress bar instead of breaking it.
    """

    def __init__(self, level: int = logging.NOTSET, stream: TextIO | None = None):
        super().__init__(level)
        self.stream = stream or sys.stderr

    def emit(self, record: logging.LogRecord) -> None:
        try:
            tqdm.write(self.format(record), file=self.stream)
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)
