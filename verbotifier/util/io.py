# -----------------------------------------------------------------------------
# console output helpers: sizes, fixed-width floats, progress bar
# -----------------------------------------------------------------------------
import re
import shutil
from math import floor, trunc

from verbotifier.util.sgr import SGRSequence, SGRRegistry


def fmt_sizeof(num: int, separator=' ', unit='b') -> str:
    # result max length: 8
    # 5 chars for number, 2 chars for unit, 1 for separator (with default options)
    num = max(0, num)
    for unit_idx, unit_prefix in enumerate(['', 'k', 'M', 'G', 'T']):
        if num >= 1024.0:
            num /= 1024.0
            continue
        if unit_idx == 0:
            num_str = f'{num:5d}'
        else:
            num_str = f'{AutoFloat(num):5f}'
        return f'{num_str}{separator}{unit_prefix}{unit}'

    return f'{num!s}{unit}'


def get_terminal_width() -> int:
    return shutil.get_terminal_size((82, 24)).columns - 2


class AutoFloat(float):
    # fixed-length float printing, decimal digits amount depends on integer part:
    # f'{AutoFloat(1234.56):4f}'   ->   1235
    # f'{AutoFloat(  12.56):4f}'   ->   12.6
    # f'{AutoFloat(   1.56):4f}'   ->   1.56
    # f'{AutoFloat(  12.56):<4d}'  ->   13

    RE_MAX_LEN = re.compile(r'(\d+)([fd])$')
    MAX_DECIMALS_LEN = 2

    def __format__(self, format_spec: str) -> str:
        return super().__format__(self._convert_spec(format_spec))

    def _convert_spec(self, format_spec: str) -> str:
        spec_match = self.RE_MAX_LEN.search(format_spec)
        if not spec_match:
            raise ValueError(f'AutoFloat format should be like "4f" or "3d", got "{format_spec}"')

        max_len = int(spec_match.group(1))
        if spec_match.group(2) == 'd':
            return self.RE_MAX_LEN.sub(f'{max_len}.0f', format_spec)

        integer_len = len(str(trunc(self)))
        decimals_and_point_len = min(self.MAX_DECIMALS_LEN + 1, max_len - integer_len)
        decimals_len = 0
        if decimals_and_point_len >= 2:  # dot without decimals makes no sense
            decimals_len = decimals_and_point_len - 1

        return self.RE_MAX_LEN.sub(f'{max_len}.{decimals_len}f', format_spec)


class BackgroundProgressBar:
    """
    Text label with a highlighted background that grows with the ratio,
    e.g. ' 45% ' with the left half painted.
    """
    def __init__(self, highlight_open_seq: SGRSequence, regular_open_seq: SGRSequence):
        self._highlight_open_seq: SGRSequence = highlight_open_seq
        self._regular_open_seq: SGRSequence = regular_open_seq
        self._source_str: str = ''
        self._ratio: float = .0

    def update(self, source_str: str, ratio: float):
        self._source_str = source_str
        self._ratio = max(0.0, min(1.0, ratio))

    def format(self) -> str:
        highlight_len = max(0, floor(self._ratio * len(self._source_str)))
        highlight_part = self._source_str[:highlight_len]
        regular_part = self._source_str[highlight_len:]

        return f'{self._highlight_open_seq} {highlight_part}' + \
               f'{SGRRegistry.FMT_RESET}{self._regular_open_seq}{regular_part} ' + \
               f'{SGRRegistry.FMT_RESET}'

    def __str__(self):
        return self._source_str
