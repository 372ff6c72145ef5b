# -----------------------------------------------------------------------------
# compact per-item console output for sequential batches
# -----------------------------------------------------------------------------
from __future__ import annotations

import sys
from typing import TextIO

from verbotifier.core.logger import Logger
from verbotifier.core.singleton import Singleton
from verbotifier.util.io import AutoFloat, BackgroundProgressBar, get_terminal_width
from verbotifier.util.sgr import SGRSequence, SGRRegistry


# noinspection PyAttributeOutsideInit
class ProgressRenderer(metaclass=Singleton):
    INDENT = 3 * ' '

    STATUS_OK = 'ok'
    STATUS_SKIP = 'skip'
    STATUS_FAIL = 'fail'
    STATUS_FORMATS = {
        STATUS_OK: SGRRegistry.FMT_GREEN,
        STATUS_SKIP: SGRRegistry.FMT_GRAY,
        STATUS_FAIL: SGRRegistry.FMT_RED,
    }

    def __init__(self, stream: TextIO|None = None):
        self._logger = Logger.get_instance()
        self._stream: TextIO = stream or sys.stdout
        self._progress_bar = BackgroundProgressBar(
            highlight_open_seq=SGRSequence(34, 1),
            regular_open_seq=SGRSequence(),
        )
        self.reinit()

    def reinit(self, items_estimated: int = 0):
        self._items_estimated: int = items_estimated
        self._item_num: int = 0
        self._failed_num: int = 0

    def before_batch(self, title: str, items_estimated: int):
        self.reinit(items_estimated)
        self._print(f'{SGRRegistry.FMT_BOLD}{title}{SGRRegistry.FMT_RESET} '
                    f'({SGRRegistry.FMT_BLUE}{items_estimated:n}{SGRRegistry.FMT_RESET} items)')
        self.print_separator()

    def after_batch(self):
        if self._failed_num:
            self._print(f'{SGRRegistry.FMT_RED}{self._failed_num:n} of {self._item_num:n} failed{SGRRegistry.FMT_RESET}')
        self._logger.debug(f'[Progress] Batch done: {self._item_num} items, {self._failed_num} failed')

    def on_item_completion(self, name: str, status: str, msg: str = ''):
        self._item_num += 1
        if status == self.STATUS_FAIL:
            self._failed_num += 1

        line = ''.join([
            self._render_introducer(),
            self._render_item_id(),
            self._render_progress_bar(),
            self._render_status(status),
            name,
            f'{self.INDENT}{SGRRegistry.FMT_GRAY}{msg}{SGRRegistry.FMT_RESET}' if msg else '',
        ])
        self._print(line)

    def print_separator(self):
        self._print('─' * min(80, get_terminal_width()))

    def _render_introducer(self) -> str:
        introducer = '>' if self._item_num % 2 == 1 else ' '
        return f'{SGRRegistry.FMT_HI_WHITE}{introducer}{SGRRegistry.FMT_RESET} '

    def _render_item_id(self) -> str:
        width = len(str(self._items_estimated or self._item_num))
        return f'{SGRSequence(1, 97)}#{self._item_num:>{width}d}{SGRRegistry.FMT_RESET}{self.INDENT}'

    def _render_progress_bar(self) -> str:
        if not self._items_estimated:
            return f'{SGRRegistry.FMT_GRAY}--- %{SGRRegistry.FMT_RESET}{self.INDENT}'
        ratio = min(1.0, self._item_num / self._items_estimated)
        self._progress_bar.update('{:>4f}%'.format(AutoFloat(100 * ratio)), ratio)
        return f'{self._progress_bar.format()}{self.INDENT}'

    def _render_status(self, status: str) -> str:
        fmt = self.STATUS_FORMATS.get(status, SGRRegistry.FMT_RESET)
        return f'{fmt}{status:<4s}{SGRRegistry.FMT_RESET}{self.INDENT}'

    def _print(self, s: str):
        print(s, file=self._stream, flush=True)
