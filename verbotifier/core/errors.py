# -----------------------------------------------------------------------------
# error taxonomy; every failure that stops a run derives from VerbotifierError
# -----------------------------------------------------------------------------
from __future__ import annotations


class VerbotifierError(Exception):
    exit_code: int = 1


class ConfigurationError(VerbotifierError):
    exit_code = 3


class NetworkError(VerbotifierError):
    pass


class ExternalToolError(VerbotifierError):
    def __init__(self, msg: str, command: list[str]|None = None, stderr: str|None = None):
        super().__init__(msg)
        self.command = command
        self.stderr = stderr

    def __str__(self) -> str:
        msg = super().__str__()
        if self.stderr:
            return f'{msg}: {self.stderr.strip()}'
        return msg


class WorkspaceApiError(VerbotifierError):
    def __init__(self, msg: str, api_error: str|None = None):
        super().__init__(msg)
        self.api_error = api_error
