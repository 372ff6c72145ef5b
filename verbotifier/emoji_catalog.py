# -----------------------------------------------------------------------------
# workspace emoji catalog: regular images and aliases
# -----------------------------------------------------------------------------
from __future__ import annotations

import abc
import os.path
from typing import Dict, List, cast
from urllib.parse import urlparse

from verbotifier.core.logger import Logger
from verbotifier.core.slack_client import SlackClient


# noinspection PyMethodMayBeStatic
class EmojiFactory:
    ALIAS_PREFIX = 'alias:'

    def from_url(self, name: str, url: str) -> AbstractEmoji:
        if url.startswith(self.ALIAS_PREFIX):
            return EmojiAlias(name, url[len(self.ALIAS_PREFIX):])
        return EmojiRegular(name, url)


class AbstractEmoji(metaclass=abc.ABCMeta):
    def __init__(self, name: str, url: str):
        self._name = name
        self._url = url

    @property
    def name(self) -> str:
        return self._name

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_regular(self) -> bool:
        return isinstance(self, EmojiRegular)

    @property
    def is_alias(self) -> bool:
        return isinstance(self, EmojiAlias)

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self._name!r}, {self._url!r})'


class EmojiRegular(AbstractEmoji):
    ANIMATED_EXTENSIONS = ('.gif',)

    def __init__(self, name: str, url: str):
        super(EmojiRegular, self).__init__(name, url)
        self._filename: str = self._name + self.extension
        self._filepath: str|None = None

    def set_dir(self, cache_dir: str):
        self._filepath = os.path.join(cache_dir, self._filename)

    @property
    def extension(self) -> str:
        return os.path.splitext(urlparse(self._url).path)[1]

    @property
    def is_animated(self) -> bool:
        return self.extension.lower() in self.ANIMATED_EXTENSIONS

    @property
    def filename(self) -> str:
        return self._filename

    @property
    def filepath(self) -> str:
        if self._filepath is None:
            raise ValueError(f'Cache directory is not set for {self._name}')
        return self._filepath

    @property
    def file_exists(self) -> bool:
        return os.path.isfile(self.filepath)


class EmojiAlias(AbstractEmoji):
    def __init__(self, name: str, alias_for_name: str):
        super(EmojiAlias, self).__init__(name, EmojiFactory.ALIAS_PREFIX + alias_for_name)
        self._alias_for_name: str = alias_for_name

    @property
    def alias_for_name(self) -> str:
        return self._alias_for_name


class EmojiSet:
    """
    Immutable snapshot of workspace emoji, in the order the API returned them.
    """
    def __init__(self, emoji_map: Dict[str, str], cache_dir: str):
        self._logger = Logger.get_instance()
        self._emoji_factory = EmojiFactory()
        self._emoji_map: Dict[str, AbstractEmoji] = {}

        for name, url in emoji_map.items():
            emoji = self._emoji_factory.from_url(name, url)
            if emoji.is_regular:
                cast(EmojiRegular, emoji).set_dir(cache_dir)
            self._emoji_map[name] = emoji

        self._logger.info(f'Loaded {len(self._emoji_map):n} emoji definitions '
                          f'({len(self.regulars):n} images, {len(self.aliases):n} aliases)')
        self._check_alias_references()

    @classmethod
    def fetch(cls, client: SlackClient, cache_dir: str) -> EmojiSet:
        return cls(client.list_emoji(), cache_dir)

    def __len__(self) -> int:
        return len(self._emoji_map)

    def __contains__(self, name: str) -> bool:
        return name in self._emoji_map

    def get_by_name(self, name: str) -> AbstractEmoji:
        if name not in self._emoji_map:
            raise KeyError(f'Emoji with name "{name}" not defined')
        return self._emoji_map[name]

    @property
    def regulars(self) -> List[EmojiRegular]:
        return [cast(EmojiRegular, e) for e in self._emoji_map.values() if e.is_regular]

    @property
    def aliases(self) -> List[EmojiAlias]:
        return [cast(EmojiAlias, e) for e in self._emoji_map.values() if e.is_alias]

    def get_aliases_for(self, name: str) -> List[EmojiAlias]:
        return [e for e in self.aliases if e.alias_for_name == name]

    def select_by_names(self, names: List[str]) -> List[EmojiRegular]:
        """
        Regular emoji for given names, in catalog order. Unknown names
        and aliases are dropped with a warning.
        """
        wanted = set(names)
        for name in names:
            if name not in self._emoji_map:
                self._logger.warn(f'No emoji named "{name}" found, skipping')
            elif self._emoji_map[name].is_alias:
                self._logger.warn(f'Emoji "{name}" is an alias, skipping')
        return [e for e in self.regulars if e.name in wanted]

    def _check_alias_references(self):
        for emoji in self.aliases:
            target = self._emoji_map.get(emoji.alias_for_name)
            if target is None:
                self._logger.debug(f'No emoji named "{emoji.alias_for_name}" found for alias "{emoji.name}"'
                                   f' - probably generic non-slack emoji name')
