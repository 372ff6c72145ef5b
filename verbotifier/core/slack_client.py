# -----------------------------------------------------------------------------
# thin Slack Web API client: emoji listing, removal, upload, file download
# -----------------------------------------------------------------------------
from __future__ import annotations

import os.path
from typing import Dict, BinaryIO

import requests
from requests import Response

from verbotifier.core.errors import NetworkError, WorkspaceApiError
from verbotifier.core.logger import Logger
from verbotifier.core.request_pacer import RequestPacer


class SlackClient:
    API_URL = 'https://slack.com/api'
    WORKSPACE_API_URL_TPL = 'https://{workspace}.slack.com/api'
    TIMEOUT = (10, 30)
    CHUNK_SIZE = 1024 * 1024

    def __init__(self, workspace: str, access_token: str, user_token: str,
                 read_pacer: RequestPacer|None = None,
                 write_pacer: RequestPacer|None = None,
                 session: requests.Session|None = None):
        self._logger = Logger.get_instance()
        self._workspace = workspace
        self._access_token = access_token
        self._user_token = user_token
        self._session = session or requests.Session()
        self._read_pacer = read_pacer or RequestPacer.for_tier_rpm(RequestPacer.TIER_3_RPM)
        self._write_pacer = write_pacer or RequestPacer.for_tier_rpm(RequestPacer.TIER_2_RPM)

    @property
    def workspace_api_url(self) -> str:
        return self.WORKSPACE_API_URL_TPL.format(workspace=self._workspace)

    def list_emoji(self) -> Dict[str, str]:
        url = f'{self.API_URL}/emoji.list'
        self._logger.debug(f'Fetching: {url}')
        response = self._read_pacer.perform(
            lambda: self._session.get(url, headers={'Authorization': f'Bearer {self._access_token}'},
                                      timeout=self.TIMEOUT),
            'emoji.list',
            self._is_rate_limited,
        )
        data = self._parse_json(response, 'emoji.list')
        if not data.get('ok'):
            raise WorkspaceApiError(f'Error attempting to list emoji: {data.get("error")}', data.get('error'))
        return data['emoji']

    def remove_emoji(self, name: str):
        if not name:
            raise ValueError('emoji.remove request must include a name')

        payload = {
            'token': self._user_token,
            'name': name,
            '_x_reason': 'customize-emoji-remove',
            '_x_mode': 'online',
        }
        self._post_workspace('emoji.remove', payload, name, 'remove')

    def add_emoji(self, name: str, filepath: str, check_existing: bool = False):
        if check_existing and name in self.list_emoji():
            raise WorkspaceApiError(f"Error attempting to add emoji '{name}': error_name_taken", 'error_name_taken')

        payload = {
            'token': self._user_token,
            'name': name,
            'mode': 'data',
        }
        with open(filepath, 'rb') as fp:
            self._post_workspace('emoji.add', payload, name, 'add',
                                 files={'image': (os.path.basename(filepath), fp)})

    def add_alias(self, name: str, alias_for: str):
        payload = {
            'token': self._user_token,
            'name': name,
            'mode': 'alias',
            'alias_for': alias_for,
        }
        self._post_workspace('emoji.add', payload, name, 'alias')

    def download(self, url: str, fp: BinaryIO) -> int:
        self._logger.debug(f'Fetching: {url}')
        try:
            with self._session.get(url, timeout=self.TIMEOUT, stream=True) as response:
                if not response.ok:
                    raise NetworkError(f'Download failed with HTTP {response.status_code}: {url}')
                content_size = 0
                for chunk in response.iter_content(self.CHUNK_SIZE):
                    fp.write(chunk)
                    content_size += len(chunk)
        except requests.RequestException as e:
            raise NetworkError(f'Download failed: {url}: {e!s}') from e
        return content_size

    def _post_workspace(self, method: str, payload: dict, name: str, action: str, files: dict|None = None):
        url = f'{self.workspace_api_url}/{method}'
        self._logger.debug(f'Posting: {url} (name={name})')
        if files:
            # file handle is consumed by the first attempt, rewind before retries
            def request_fn() -> Response:
                for _, fp in files.values():
                    fp.seek(0)
                return self._session.post(url, data=payload, files=files, timeout=self.TIMEOUT)
        else:
            def request_fn() -> Response:
                return self._session.post(url, data=payload, timeout=self.TIMEOUT)

        response = self._write_pacer.perform(request_fn, f'{method} {name}', self._is_rate_limited)
        data = self._parse_json(response, method)
        if not data.get('ok'):
            raise WorkspaceApiError(f"Error attempting to {action} emoji '{name}': {data.get('error')}",
                                    data.get('error'))

    def _is_rate_limited(self, response: Response) -> bool:
        # workspace endpoints may answer HTTP 200 with {"ok": false, "error": "ratelimited"}
        if RequestPacer.is_rate_limited(response):
            return True
        if not response.ok:
            return False
        try:
            data = response.json()
        except ValueError:
            return False
        return isinstance(data, dict) and data.get('error') == 'ratelimited'

    def _parse_json(self, response: Response, method: str) -> dict:
        if not response.ok:
            raise NetworkError(f'{method} failed with HTTP {response.status_code}')
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(f'{method} returned malformed JSON') from e
