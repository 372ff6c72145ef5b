from __future__ import annotations

import io
import os
from typing import Dict, List, Tuple

import pytest

from verbotifier.core.errors import ExternalToolError
from verbotifier.core.logger import Logger
from verbotifier.core.progress_renderer import ProgressRenderer


@pytest.fixture(autouse=True)
def quiet_output(tmp_path):
    Logger._instance = Logger(filename=str(tmp_path / 'log' / 'test.log'))
    ProgressRenderer.drop_instance()
    ProgressRenderer.get_instance(stream=io.StringIO())
    yield
    Logger._instance.close_io()
    Logger._instance = None
    ProgressRenderer.drop_instance()


VERBOTICON_REPORT = """\
Image:
  Filename: a.png
  Format: PNG (Portable Network Graphics)
  Geometry: 10x10+0+0
  Colorspace: Gray
  Type: GrayscaleAlpha
  Channel depth:
    Gray: 8-bit
    Alpha: 8-bit
  Histogram:
        91: (  0,  0) #00000000 graya(0,0)
         9: (  0,255) #000000FF graya(0,1)
  Number pixels: 100
"""

COLORFUL_REPORT = """\
Image:
  Filename: c.png
  Colorspace: sRGB
  Type: TrueColorAlpha
  Channel depth:
    Red: 8-bit
    Green: 8-bit
    Blue: 8-bit
    Alpha: 8-bit
  Histogram:
        40: (255,  0,  0,255) #FF0000FF red
        30: (  0,128,  0,255) #008000FF green
        20: (  0,  0,  0,  0) #00000000 none
        10: (  0,  0,  0,255) #000000FF black
  Number pixels: 100
"""


class FakeSlackClient:
    def __init__(self, emoji_map: Dict[str, str]):
        self.emoji_map = dict(emoji_map)
        self.calls: List[Tuple] = []
        self.fail_on: Dict[Tuple, Exception] = {}

    def _call(self, *call):
        self.calls.append(call)
        if call in self.fail_on:
            raise self.fail_on[call]

    def list_emoji(self) -> Dict[str, str]:
        self._call('list')
        return dict(self.emoji_map)

    def download(self, url: str, fp) -> int:
        self._call('download', url)
        fp.write(b'PNGDATA')
        return 7

    def remove_emoji(self, name: str):
        self._call('remove', name)

    def add_emoji(self, name: str, filepath: str, check_existing: bool = False):
        self._call('add', name, os.path.basename(filepath))

    def add_alias(self, name: str, alias_for: str):
        self._call('alias', name, alias_for)

    @property
    def mutation_calls(self) -> List[Tuple]:
        return [c for c in self.calls if c[0] in ('remove', 'add', 'alias')]


class FakeTool:
    """Stands in for ExternalTool; returns canned output keyed by file basename."""
    def __init__(self, outputs: Dict[str, str]|None = None, log: List[Tuple]|None = None):
        self.outputs = outputs or {}
        self.calls: List[Tuple] = []
        self.log = log

    def run(self, *args: str) -> str:
        call = tuple(os.path.basename(a) for a in args)
        self.calls.append(call)
        if self.log is not None:
            self.log.append(('tool',) + call)
        key = call[0]
        if key in self.outputs:
            return self.outputs[key]
        if self.outputs:
            raise ExternalToolError(f'No canned output for {key}')
        return ''
