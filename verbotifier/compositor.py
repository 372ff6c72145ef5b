# -----------------------------------------------------------------------------
# flattening emoji images onto a fixed background
# -----------------------------------------------------------------------------
from __future__ import annotations

import os

from verbotifier.core.external_tool import ExternalTool
from verbotifier.core.logger import Logger
from verbotifier.emoji_catalog import EmojiRegular


class BackgroundCompositor:
    def __init__(self, tool: ExternalTool, background_path: str, output_dir: str):
        self._logger: Logger = Logger.get_instance()
        self._tool = tool
        self._background_path = background_path
        self._output_dir = output_dir

    def get_output_path(self, emoji: EmojiRegular) -> str:
        return os.path.join(self._output_dir, emoji.filename)

    def apply(self, emoji: EmojiRegular) -> str:
        os.makedirs(self._output_dir, exist_ok=True)
        output_path = self.get_output_path(emoji)
        self._tool.run(emoji.filepath, self._background_path, output_path)
        self._logger.debug(f'Composited {emoji.name}: {output_path}')
        return output_path
