from __future__ import annotations

import json
import os
import signal
import sys
import traceback

from verbotifier.core.errors import VerbotifierError
from verbotifier.core.logger import Logger


# noinspection PyMethodMayBeStatic
class ExceptionHandler:
    SIGINT_EXIT_CODE = 2

    def __init__(self, logger: Logger|None = None):
        if not logger:
            logger = Logger.get_instance()
        self._logger = logger
        signal.signal(signal.SIGINT, lambda signum, f: self.on_signal(signum, f))

    def on_signal(self, s, f):
        self._logger.warn('Interrupted, workspace may be partially updated')
        self._logger.debug('Terminating (SIGINT)')
        sys.exit(self.SIGINT_EXIT_CODE)

    def handle(self, e: Exception):
        self._write(e)
        if os.environ.get('EXCEPTION_TRACE', None):
            self._write_with_trace(e)
        sys.exit(self._get_exit_code(e))

    def _get_exit_code(self, e: Exception) -> int:
        if isinstance(e, VerbotifierError):
            return e.exit_code
        return 1

    def _write(self, e: Exception):
        if isinstance(e, VerbotifierError):
            self._logger.error(f'{e.__class__.__name__}: {e!s}')
        else:
            self._logger.error(f'Unexpected error: {e!r}')

    def _write_with_trace(self, e: Exception):
        tb_splitted = traceback.format_exception(e.__class__, e, e.__traceback__)
        tb_lines = [line.rstrip('\n') for line in tb_splitted]

        self._logger.error(json.dumps(tb_splitted, ensure_ascii=False), silent=True)
        print("\n".join(tb_lines), file=sys.stderr)
