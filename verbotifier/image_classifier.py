# -----------------------------------------------------------------------------
# verboticon detection: black glyph on transparent background, nothing else
# -----------------------------------------------------------------------------
from __future__ import annotations

import re
from typing import Dict, List

from verbotifier.core.errors import ExternalToolError
from verbotifier.core.external_tool import ExternalTool
from verbotifier.core.logger import Logger
from verbotifier.core.progress_renderer import ProgressRenderer
from verbotifier.emoji_catalog import EmojiRegular

ColorHistogram = Dict[str, int]

COLOR_TRANSPARENT = '#00000000'
COLOR_BLACK = '#000000FF'
COVERAGE_THRESHOLD = 0.9


class ImageStats:
    def __init__(self, histogram: ColorHistogram, total_pixels: int, is_grayscale: bool):
        if total_pixels <= 0:
            raise ValueError(f'Total pixel count should be positive, got {total_pixels}')
        self.histogram: ColorHistogram = histogram
        self.total_pixels: int = total_pixels
        self.is_grayscale: bool = is_grayscale

    def count(self, color: str) -> int:
        return self.histogram.get(color.upper(), 0)

    @property
    def transparent_count(self) -> int:
        return self.count(COLOR_TRANSPARENT)

    @property
    def black_count(self) -> int:
        return self.count(COLOR_BLACK)

    def __repr__(self) -> str:
        return f'ImageStats(colors={len(self.histogram)}, total_pixels={self.total_pixels}, ' \
               f'is_grayscale={self.is_grayscale}, transparent={self.transparent_count}, black={self.black_count})'


# histogram line example (ImageMagick "identify -verbose"):
#       3211: (  0,  0,  0,  0) #00000000 none
HISTOGRAM_LINE_REGEX = re.compile(r'^\s*(\d+):.*?(#[0-9A-Fa-f]{8})\b', re.MULTILINE)
NUMBER_PIXELS_REGEX = re.compile(r'Number pixels:\s*(\d+(?:\.\d+)?)([KMG]?)\b')
GRAYSCALE_MARKER_REGEX = re.compile(r'\bGray:')
PIXEL_COUNT_MULTIPLIERS = {'': 1, 'K': 10**3, 'M': 10**6, 'G': 10**9}


def parse_inspection_report(text: str) -> ImageStats:
    """
    Extracts color histogram, total pixel count and grayscale flag from the
    verbose textual report of the image inspection tool.

    A color listed more than once keeps the last count. Raises
    ExternalToolError if the report has no pixel count.
    """
    histogram: ColorHistogram = {}
    for count, color in HISTOGRAM_LINE_REGEX.findall(text):
        histogram[color.upper()] = int(count)

    pixels_match = NUMBER_PIXELS_REGEX.search(text)
    if not pixels_match:
        raise ExternalToolError('Unparseable inspection report: "Number pixels" not found')
    total_pixels = round(float(pixels_match.group(1)) * PIXEL_COUNT_MULTIPLIERS[pixels_match.group(2)])
    if total_pixels <= 0:
        raise ExternalToolError(f'Unparseable inspection report: invalid pixel count {pixels_match.group(0)!r}')

    is_grayscale = GRAYSCALE_MARKER_REGEX.search(text) is not None
    return ImageStats(histogram, total_pixels, is_grayscale)


def is_verboticon(stats: ImageStats) -> bool:
    # anti-aliased glyph edges are the only pixels allowed besides transparent and black
    transparent = stats.transparent_count
    black = stats.black_count
    return stats.is_grayscale \
        and transparent > black \
        and black > 0 \
        and (transparent + black) / stats.total_pixels > COVERAGE_THRESHOLD


class ImageClassifier:
    def __init__(self, inspector: ExternalTool):
        self._logger: Logger = Logger.get_instance()
        self._renderer: ProgressRenderer = ProgressRenderer.get_instance()
        self._inspector = inspector

    def classify(self, emoji: EmojiRegular) -> bool:
        if emoji.is_animated:
            self._logger.debug(f'Skipping animated emoji: {emoji.name}')
            return False

        report = self._inspector.run(emoji.filepath)
        try:
            stats = parse_inspection_report(report)
        except ExternalToolError as e:
            raise ExternalToolError(f'{e!s} (emoji "{emoji.name}", file {emoji.filepath})') from e

        result = is_verboticon(stats)
        self._logger.debug(f'Classified {emoji.name}: {stats!r} -> {result}')
        return result

    def select_verboticons(self, emojis: List[EmojiRegular]) -> List[EmojiRegular]:
        self._renderer.before_batch('Classifying', len(emojis))
        selected = []
        for emoji in emojis:
            if emoji.is_animated:
                self._renderer.on_item_completion(emoji.name, ProgressRenderer.STATUS_SKIP, 'animated')
                continue
            if self.classify(emoji):
                selected.append(emoji)
                self._renderer.on_item_completion(emoji.name, ProgressRenderer.STATUS_OK, 'verboticon')
            else:
                self._renderer.on_item_completion(emoji.name, ProgressRenderer.STATUS_SKIP)
        self._renderer.after_batch()
        return selected
