# -----------------------------------------------------------------------------
# local download cache of emoji images
# -----------------------------------------------------------------------------
from __future__ import annotations

import os
from typing import List

from verbotifier.core.errors import NetworkError
from verbotifier.core.logger import Logger
from verbotifier.core.progress_renderer import ProgressRenderer
from verbotifier.core.slack_client import SlackClient
from verbotifier.emoji_catalog import EmojiRegular
from verbotifier.util.io import fmt_sizeof


class AssetCache:
    PARTIAL_SUFFIX = '.part'

    def __init__(self, client: SlackClient, cache_dir: str):
        self._logger: Logger = Logger.get_instance()
        self._renderer: ProgressRenderer = ProgressRenderer.get_instance()
        self._client = client
        self._cache_dir = cache_dir

    def ensure_all(self, emojis: List[EmojiRegular]) -> int:
        os.makedirs(self._cache_dir, exist_ok=True)
        missing = [e for e in emojis if not e.file_exists]
        self._logger.info(f'Found {len(emojis) - len(missing):n} already downloaded files')
        if not missing:
            return 0

        self._renderer.before_batch('Downloading', len(missing))
        fetched = 0
        for emoji in missing:
            if self.ensure(emoji):
                fetched += 1
        self._renderer.after_batch()
        return fetched

    def ensure(self, emoji: EmojiRegular) -> bool:
        if emoji.file_exists:
            return False

        os.makedirs(os.path.dirname(emoji.filepath) or '.', exist_ok=True)
        partial_path = emoji.filepath + self.PARTIAL_SUFFIX
        try:
            with open(partial_path, 'wb') as fp:
                content_size = self._client.download(emoji.url, fp)
        except NetworkError:
            self._remove_partial(partial_path)
            self._renderer.on_item_completion(emoji.name, ProgressRenderer.STATUS_FAIL)
            raise
        os.replace(partial_path, emoji.filepath)

        self._logger.debug(f'Writing done: {emoji.filepath} ({fmt_sizeof(content_size).strip()})')
        self._renderer.on_item_completion(emoji.name, ProgressRenderer.STATUS_OK, fmt_sizeof(content_size).strip())
        return True

    def _remove_partial(self, partial_path: str):
        try:
            os.remove(partial_path)
        except FileNotFoundError:
            pass
