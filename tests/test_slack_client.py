import io
from unittest.mock import Mock, MagicMock

import pytest
import requests

from verbotifier.core.errors import WorkspaceApiError, NetworkError
from verbotifier.core.request_pacer import RequestPacer
from verbotifier.core.slack_client import SlackClient


def make_response(status_code=200, json_data=None, headers=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.headers = headers or {}
    response.json.return_value = json_data
    return response


def make_client(session) -> SlackClient:
    pacer = RequestPacer(sleep_fn=Mock())
    return SlackClient('myteam', 'xoxp-read', 'xoxc-user', read_pacer=pacer, write_pacer=pacer, session=session)


def test_list_emoji():
    session = Mock()
    session.get.return_value = make_response(json_data={'ok': True, 'emoji': {'a': 'http://x/a.png'}})

    assert make_client(session).list_emoji() == {'a': 'http://x/a.png'}
    args, kwargs = session.get.call_args
    assert args[0] == 'https://slack.com/api/emoji.list'
    assert kwargs['headers'] == {'Authorization': 'Bearer xoxp-read'}


def test_list_emoji_api_error():
    session = Mock()
    session.get.return_value = make_response(json_data={'ok': False, 'error': 'invalid_auth'})

    with pytest.raises(WorkspaceApiError, match='invalid_auth'):
        make_client(session).list_emoji()


def test_remove_emoji_posts_to_workspace():
    session = Mock()
    session.post.return_value = make_response(json_data={'ok': True})

    make_client(session).remove_emoji('a')
    args, kwargs = session.post.call_args
    assert args[0] == 'https://myteam.slack.com/api/emoji.remove'
    assert kwargs['data']['name'] == 'a'
    assert kwargs['data']['token'] == 'xoxc-user'


def test_remove_emoji_not_ok_includes_name_and_error():
    session = Mock()
    session.post.return_value = make_response(json_data={'ok': False, 'error': 'no_permission'})

    with pytest.raises(WorkspaceApiError, match="'a': no_permission") as e:
        make_client(session).remove_emoji('a')
    assert e.value.api_error == 'no_permission'


def test_remove_emoji_requires_name():
    with pytest.raises(ValueError):
        make_client(Mock()).remove_emoji('')


def test_add_emoji_uploads_file(tmp_path):
    image = tmp_path / 'a.png'
    image.write_bytes(b'PNG')
    session = Mock()
    session.post.return_value = make_response(json_data={'ok': True})

    make_client(session).add_emoji('a', str(image))
    args, kwargs = session.post.call_args
    assert args[0] == 'https://myteam.slack.com/api/emoji.add'
    assert kwargs['data']['mode'] == 'data'
    assert kwargs['files']['image'][0] == 'a.png'
    session.get.assert_not_called()


def test_add_emoji_check_existing(tmp_path):
    image = tmp_path / 'a.png'
    image.write_bytes(b'PNG')
    session = Mock()
    session.get.return_value = make_response(json_data={'ok': True, 'emoji': {'a': 'http://x/a.png'}})

    with pytest.raises(WorkspaceApiError, match='error_name_taken'):
        make_client(session).add_emoji('a', str(image), check_existing=True)
    session.post.assert_not_called()


def test_add_alias():
    session = Mock()
    session.post.return_value = make_response(json_data={'ok': True})

    make_client(session).add_alias('b', 'a')
    _, kwargs = session.post.call_args
    assert kwargs['data']['mode'] == 'alias'
    assert kwargs['data']['alias_for'] == 'a'
    assert kwargs['data']['name'] == 'b'


def test_http_error_is_network_error():
    session = Mock()
    session.post.return_value = make_response(status_code=500)

    with pytest.raises(NetworkError, match='500'):
        make_client(session).add_alias('b', 'a')


def test_download_streams_chunks():
    response = MagicMock()
    response.ok = True
    response.iter_content.return_value = [b'abc', b'de']
    response.__enter__.return_value = response
    session = Mock()
    session.get.return_value = response
    fp = io.BytesIO()

    assert make_client(session).download('http://x/a.png', fp) == 5
    assert fp.getvalue() == b'abcde'
    assert session.get.call_args[1]['stream'] is True


def test_download_transport_failure():
    session = Mock()
    session.get.side_effect = requests.ConnectionError('reset')

    with pytest.raises(NetworkError, match='reset'):
        make_client(session).download('http://x/a.png', io.BytesIO())


def test_ratelimited_body_is_waited_out():
    session = Mock()
    session.post.side_effect = [
        make_response(json_data={'ok': False, 'error': 'ratelimited'}, headers={'Retry-After': '3'}),
        make_response(json_data={'ok': True}),
    ]
    sleep_fn = Mock()
    pacer = RequestPacer(sleep_fn=sleep_fn)
    client = SlackClient('myteam', 'xoxp-read', 'xoxc-user', read_pacer=pacer, write_pacer=pacer, session=session)

    client.add_alias('b', 'a')

    assert session.post.call_count == 2
    sleep_fn.assert_called_once_with(3.0)


def test_upload_is_rewound_after_ratelimited_body(tmp_path):
    image = tmp_path / 'a.png'
    image.write_bytes(b'PNG')
    uploaded = []

    def post(url, data, files, timeout):
        uploaded.append(files['image'][1].read())
        if len(uploaded) == 1:
            return make_response(json_data={'ok': False, 'error': 'ratelimited'})
        return make_response(json_data={'ok': True})

    session = Mock()
    session.post.side_effect = post

    make_client(session).add_emoji('a', str(image))
    assert uploaded == [b'PNG', b'PNG']


def test_other_api_errors_are_not_retried():
    session = Mock()
    session.post.return_value = make_response(json_data={'ok': False, 'error': 'error_name_taken'})

    with pytest.raises(WorkspaceApiError, match='error_name_taken'):
        make_client(session).add_alias('b', 'a')
    assert session.post.call_count == 1
