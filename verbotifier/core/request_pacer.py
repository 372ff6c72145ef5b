# -----------------------------------------------------------------------------
# request rate pacing for Slack tiered endpoints
# -----------------------------------------------------------------------------
from __future__ import annotations

import time
from typing import Callable

import requests
from requests import Response

from verbotifier.core.errors import NetworkError
from verbotifier.core.logger import Logger


class RequestPacer:
    """
    Keeps at least ``min_interval_sec`` between consecutive requests and waits
    out rate-limited responses (HTTP 429 unless another check is passed)
    for as long as Slack asks (``Retry-After`` header).
    Requests that failed for any other reason are never re-issued.
    """
    TIER_2_RPM = 20
    TIER_3_RPM = 50
    RATE_LIMITED_RETRY_MAX_NUM = 5
    RETRY_AFTER_DEFAULT_SEC = 30.0

    @classmethod
    def for_tier_rpm(cls, rpm: int, **kwargs) -> RequestPacer:
        return cls(60.0 / rpm, **kwargs)

    def __init__(self,
                 min_interval_sec: float = .0,
                 sleep_fn: Callable[[float], None] = time.sleep,
                 time_fn: Callable[[], float] = time.monotonic):
        self._logger = Logger.get_instance()
        self._min_interval_sec: float = max(.0, min_interval_sec)
        self._sleep_fn = sleep_fn
        self._time_fn = time_fn
        self._last_request_time: float|None = None

    @staticmethod
    def is_rate_limited(response: Response) -> bool:
        return response.status_code == 429

    def perform(self, request_fn: Callable[[], Response], label: str,
                is_rate_limited: Callable[[Response], bool]|None = None) -> Response:
        is_rate_limited = is_rate_limited or self.is_rate_limited
        attempt_num = 0
        while True:
            attempt_num += 1
            self._wait_for_slot()
            try:
                response = request_fn()
            except requests.RequestException as e:
                raise NetworkError(f'Request failed ({label}): {e!s}') from e
            finally:
                self._last_request_time = self._time_fn()

            if not is_rate_limited(response):
                return response
            if attempt_num > self.RATE_LIMITED_RETRY_MAX_NUM:
                raise NetworkError(f'Still rate limited after {attempt_num} attempts ({label})')

            retry_after_sec = self._get_retry_after(response)
            self._logger.warn(f'Rate limited ({label}), waiting for {retry_after_sec:.0f}s')
            self._sleep_fn(retry_after_sec)

    def _wait_for_slot(self):
        if self._last_request_time is None or not self._min_interval_sec:
            return
        delay = self._min_interval_sec - (self._time_fn() - self._last_request_time)
        if delay > 0:
            self._logger.debug(f'[Pacer] Waiting for {delay:.2f}s')
            self._sleep_fn(delay)

    def _get_retry_after(self, response: Response) -> float:
        try:
            return float(response.headers['Retry-After'])
        except (KeyError, ValueError):
            return self.RETRY_AFTER_DEFAULT_SEC
