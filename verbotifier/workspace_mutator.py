# -----------------------------------------------------------------------------
# replacing workspace emoji in place: remove, upload, restore aliases
# -----------------------------------------------------------------------------
from __future__ import annotations

from typing import List

from verbotifier.core.errors import VerbotifierError, WorkspaceApiError
from verbotifier.core.logger import Logger
from verbotifier.core.slack_client import SlackClient
from verbotifier.emoji_catalog import EmojiRegular, EmojiSet, EmojiAlias


class AliasRestoreError(WorkspaceApiError):
    def __init__(self, emoji_name: str, failed: List[str], restored: List[EmojiAlias]):
        super().__init__(f'Failed to restore {len(failed)} alias(es) for "{emoji_name}": {", ".join(failed)}')
        self.failed = failed
        self.restored = restored


class WorkspaceMutator:
    def __init__(self, client: SlackClient):
        self._logger: Logger = Logger.get_instance()
        self._client = client

    def remove(self, name: str):
        self._client.remove_emoji(name)
        self._logger.info(f'Removed :{name}:', silent=True)

    def add(self, emoji: EmojiRegular, filepath: str):
        # the catalog snapshot is fresh enough, skip the collision check
        self._client.add_emoji(emoji.name, filepath, check_existing=False)
        self._logger.info(f'Uploaded :{emoji.name}: from {filepath}', silent=True)

    def restore_aliases(self, emoji: EmojiRegular, emoji_set: EmojiSet) -> List[EmojiAlias]:
        """
        Recreates every alias of ``emoji`` in catalog order. All aliases are
        attempted; AliasRestoreError lists the ones that failed.
        """
        restored = []
        failed = []
        for alias in emoji_set.get_aliases_for(emoji.name):
            try:
                self._client.add_alias(alias.name, emoji.name)
            except VerbotifierError as e:
                self._logger.error(f'Alias :{alias.name}: -> :{emoji.name}: failed: {e!s}')
                failed.append(alias.name)
                continue
            self._logger.info(f'Restored alias :{alias.name}: -> :{emoji.name}:', silent=True)
            restored.append(alias)

        if failed:
            raise AliasRestoreError(emoji.name, failed, restored)
        return restored

    def replace(self, emoji: EmojiRegular, filepath: str, emoji_set: EmojiSet) -> List[EmojiAlias]:
        self.remove(emoji.name)
        self.add(emoji, filepath)
        return self.restore_aliases(emoji, emoji_set)
