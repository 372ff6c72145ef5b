import os

import pytest

from verbotifier.emoji_catalog import EmojiFactory, EmojiSet, EmojiRegular, EmojiAlias

EMOJI_MAP = {
    'a': 'https://emoji.slack-edge.com/T01/a/0f1e2d.png',
    'b': 'alias:a',
    'c': 'https://emoji.slack-edge.com/T01/c/9a8b7c.gif?v=2',
    'd': 'alias:a',
    'e': 'alias:thumbsup',
}


def test_factory_splits_regulars_and_aliases():
    factory = EmojiFactory()
    regular = factory.from_url('a', 'http://x/a.png')
    alias = factory.from_url('b', 'alias:a')

    assert isinstance(regular, EmojiRegular) and regular.is_regular and not regular.is_alias
    assert isinstance(alias, EmojiAlias) and alias.is_alias
    assert alias.alias_for_name == 'a'


def test_filepath_is_name_plus_source_extension(tmp_path):
    emoji_set = EmojiSet(EMOJI_MAP, str(tmp_path))
    a = emoji_set.get_by_name('a')
    c = emoji_set.get_by_name('c')

    assert a.filepath == os.path.join(str(tmp_path), 'a.png')
    assert c.filepath == os.path.join(str(tmp_path), 'c.gif')
    assert c.is_animated and not a.is_animated


def test_filepath_requires_dir():
    with pytest.raises(ValueError):
        _ = EmojiRegular('a', 'http://x/a.png').filepath


def test_emoji_set_keeps_catalog_order(tmp_path):
    emoji_set = EmojiSet(EMOJI_MAP, str(tmp_path))

    assert len(emoji_set) == 5
    assert [e.name for e in emoji_set.regulars] == ['a', 'c']
    assert [e.name for e in emoji_set.aliases] == ['b', 'd', 'e']
    assert [e.name for e in emoji_set.get_aliases_for('a')] == ['b', 'd']
    assert emoji_set.get_aliases_for('c') == []


def test_get_by_name_unknown(tmp_path):
    with pytest.raises(KeyError):
        EmojiSet(EMOJI_MAP, str(tmp_path)).get_by_name('zzz')


def test_select_by_names_drops_unknown_and_aliases(tmp_path):
    emoji_set = EmojiSet(EMOJI_MAP, str(tmp_path))
    selected = emoji_set.select_by_names(['c', 'missing', 'b', 'a'])
    assert [e.name for e in selected] == ['a', 'c']


def test_fetch_uses_client(tmp_path):
    class Client:
        def list_emoji(self):
            return {'x': 'http://x/x.jpg'}

    emoji_set = EmojiSet.fetch(Client(), str(tmp_path))
    assert 'x' in emoji_set
    assert emoji_set.get_by_name('x').filename == 'x.jpg'
