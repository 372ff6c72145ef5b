# -----------------------------------------------------------------------------
# console + file logger
# -----------------------------------------------------------------------------
from __future__ import annotations

import os
import sys
import time
from datetime import datetime
from typing import Optional, TextIO

from verbotifier.util.sgr import SGRRegistry


class Logger:
    PREFIX = 'VERBOTIFIER'
    LOG_DIR = './log'

    _instance: Logger = None

    @classmethod
    def get_instance(cls, require_new: bool = False, *args, **kwargs) -> Logger:
        if cls._instance and not require_new:
            return cls._instance
        instance = cls(*args, **kwargs)
        if not cls._instance:
            cls._instance = instance
        return instance

    def __init__(self, filename: str|None = None):
        self._fileio: Optional[TextIO] = None
        self._open_io(filename)

    def log(self, text: str, level: str = 'info'):
        if not self._fileio or self._fileio.closed:
            return

        dt, micro = datetime.now().strftime("%Y-%m-%d %H:%M:%S.%f").rsplit('.', 1)
        print(f'{dt}.{micro:.3s} {self.PREFIX} {level.upper()}: {text}',
              file=self._fileio, end='\n', flush=True)

    def debug(self, text: str, silent: bool = True):
        if not silent:
            print(f'{SGRRegistry.FMT_CYAN!s}{text}{SGRRegistry.FMT_RESET!s}', file=sys.stdout)
        self.log(text, 'debug')

    def info(self, text: str, silent: bool = False):
        if not silent:
            print(text, file=sys.stdout)
        self.log(text, 'info')

    def warn(self, text: str, silent: bool = False):
        if not silent:
            print(f'{SGRRegistry.FMT_YELLOW!s}{text}{SGRRegistry.FMT_RESET!s}', file=sys.stdout)
        self.log(text, 'warn')

    def error(self, text: str, silent: bool = False):
        if not silent:
            print(f'{SGRRegistry.FMT_RED!s}{text}{SGRRegistry.FMT_RESET!s}', file=sys.stderr)
        self.log(text, 'error')

    def _get_default_filename(self) -> str:
        return os.path.join(self.LOG_DIR, time.strftime("log.%Y-%m-%d.log", time.gmtime()))

    def _open_io(self, filename: str|None):
        log_filename = filename or self._get_default_filename()
        try:
            os.makedirs(os.path.dirname(log_filename) or '.', exist_ok=True)
            self._fileio = open(log_filename, 'a', encoding='utf-8')
        except OSError as e:
            print(f'WARNING: Opening log file {log_filename} failed: {e}', file=sys.stderr)
            return
        self.debug(f'Opened log file for appending: {log_filename}')

    def close_io(self):
        if not self._fileio:
            return
        self._fileio.flush()
        self._fileio.close()
        self._fileio = None
