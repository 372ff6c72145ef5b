# -----------------------------------------------------------------------------
# run configuration, read once from environment (and .env) at startup
# -----------------------------------------------------------------------------
from __future__ import annotations

import os
import shlex
from typing import List, Mapping

from dotenv import load_dotenv

from verbotifier.core.errors import ConfigurationError


class Config:
    REQUIRED_VARS = {
        'SLACK_ACCESS_TOKEN': 'read-only API token used to list workspace emoji',
        'SLACK_WORKSPACE': 'workspace subdomain, e.g. "myteam" for myteam.slack.com',
        'SLACK_USER_TOKEN': 'privileged user token used to remove/add emoji',
    }
    FALSY_VALUES = ('', '0', 'false', 'no', 'off', 'n')

    DEFAULT_CACHE_DIR = './.cache'
    DEFAULT_OUTPUT_DIR = './.output'
    DEFAULT_BACKGROUND = './background.png'
    DEFAULT_INSPECT_CMD = 'identify -verbose'
    DEFAULT_COMPOSITE_CMD = 'composite'

    def __init__(self,
                 access_token: str,
                 workspace: str,
                 user_token: str,
                 dry_run: bool = False,
                 cache_dir: str = DEFAULT_CACHE_DIR,
                 output_dir: str = DEFAULT_OUTPUT_DIR,
                 background_path: str = DEFAULT_BACKGROUND,
                 inspect_cmd: List[str] = None,
                 composite_cmd: List[str] = None):
        self.access_token: str = access_token
        self.workspace: str = workspace
        self.user_token: str = user_token
        self.dry_run: bool = dry_run
        self.cache_dir: str = cache_dir
        self.output_dir: str = output_dir
        self.background_path: str = background_path
        self.inspect_cmd: List[str] = inspect_cmd or shlex.split(self.DEFAULT_INSPECT_CMD)
        self.composite_cmd: List[str] = composite_cmd or shlex.split(self.DEFAULT_COMPOSITE_CMD)

    @classmethod
    def from_env(cls, environ: Mapping[str, str]|None = None, env_file: str|None = None) -> Config:
        if environ is None:
            if env_file and os.path.isfile(env_file):
                load_dotenv(env_file)
            environ = os.environ

        missing = [name for name in cls.REQUIRED_VARS.keys() if not environ.get(name, '').strip()]
        if missing:
            details = '; '.join(f'{name} ({cls.REQUIRED_VARS[name]})' for name in missing)
            raise ConfigurationError(f'Missing required environment variables: {details}')

        return cls(
            access_token=environ['SLACK_ACCESS_TOKEN'].strip(),
            workspace=environ['SLACK_WORKSPACE'].strip(),
            user_token=environ['SLACK_USER_TOKEN'].strip(),
            dry_run=cls.is_truthy(environ.get('DRY_RUN')),
            cache_dir=environ.get('VERBOTIFIER_CACHE_DIR') or cls.DEFAULT_CACHE_DIR,
            output_dir=environ.get('VERBOTIFIER_OUTPUT_DIR') or cls.DEFAULT_OUTPUT_DIR,
            background_path=environ.get('VERBOTIFIER_BACKGROUND') or cls.DEFAULT_BACKGROUND,
            inspect_cmd=shlex.split(environ.get('VERBOTIFIER_INSPECT_CMD') or cls.DEFAULT_INSPECT_CMD),
            composite_cmd=shlex.split(environ.get('VERBOTIFIER_COMPOSITE_CMD') or cls.DEFAULT_COMPOSITE_CMD),
        )

    @classmethod
    def is_truthy(cls, value: str|None) -> bool:
        if value is None:
            return False
        return value.strip().lower() not in cls.FALSY_VALUES

    def __repr__(self) -> str:
        return f'Config(workspace={self.workspace!r}, dry_run={self.dry_run}, ' \
               f'cache_dir={self.cache_dir!r}, output_dir={self.output_dir!r}, ' \
               f'background_path={self.background_path!r})'
