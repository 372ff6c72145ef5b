# -----------------------------------------------------------------------------
# external command-line tool invocation (argument list, no shell)
# -----------------------------------------------------------------------------
from __future__ import annotations

import subprocess
from typing import List, Sequence

from verbotifier.core.errors import ExternalToolError
from verbotifier.core.logger import Logger


class ExternalTool:
    def __init__(self, base_cmd: Sequence[str], timeout_sec: float|None = 60):
        if not base_cmd:
            raise ValueError('Empty command')
        self._logger = Logger.get_instance()
        self._base_cmd: List[str] = list(base_cmd)
        self._timeout_sec = timeout_sec

    @property
    def name(self) -> str:
        return self._base_cmd[0]

    def run(self, *args: str) -> str:
        cmd = self._base_cmd + list(args)
        self._logger.debug(f'Running: {cmd!r}')
        try:
            # reports may carry image metadata in arbitrary encodings
            result = subprocess.run(cmd, capture_output=True, encoding='utf-8', errors='replace',
                                    check=False, timeout=self._timeout_sec)
        except FileNotFoundError as e:
            raise ExternalToolError(f'Command not found: {self.name}', cmd) from e
        except subprocess.TimeoutExpired as e:
            raise ExternalToolError(f'Command timed out after {self._timeout_sec}s: {self.name}', cmd) from e

        if result.returncode != 0:
            raise ExternalToolError(f'Command {self.name} exited with code {result.returncode}', cmd, result.stderr)
        return result.stdout
