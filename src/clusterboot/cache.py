# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/cache.py

from __future__ import annotations

import logging
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Optional, Union

import requests

from clusterboot.errors import CacheError

log = logging.getLogger("clusterboot")


class Cache:
    """
    Keeps a local copy of a remote file.

    get() re-fetches once the copy is older than ``refresh_seconds``. When the
    remote is unreachable the last copy written to ``local_path`` is served
    and the next attempt waits for the following window. While one caller
    refreshes, others are handed the copy already held.
    """

    def __init__(
        self,
        url: str,
        local_path: Union[str, Path],
        *,
        refresh_seconds: float = 60,
        timeout: float = 30,
    ):
        self.url = url
        self.local_path = Path(local_path)
        self.refresh_seconds = refresh_seconds
        self.timeout = timeout
        self._lock = threading.Lock()
        self._content: Optional[bytes] = None
        self._fetched_at = 0.0
        self._refreshing = False

    def _fetch(self) -> bytes:
        r = requests.get(self.url, timeout=self.timeout)
        r.raise_for_status()
        return r.content

    def get(self) -> bytes:
        with self._lock:
            fresh = time.monotonic() - self._fetched_at < self.refresh_seconds
            if self._content is not None and (fresh or self._refreshing):
                return self._content
            self._refreshing = True

        try:
            content = self._fetch()
        except requests.RequestException as e:
            log.warning("Failed to fetch %s: %s", self.url, e)
            return self._fallback(e)
        finally:
            with self._lock:
                self._refreshing = False

        with self._lock:
            self.local_path.parent.mkdir(parents=True, exist_ok=True)
            self.local_path.write_bytes(content)
            self._content = content
            self._fetched_at = time.monotonic()
        log.debug("Fetched %s (%d bytes) -> %s", self.url, len(content), self.local_path)
        return content

    def _fallback(self, cause: Exception) -> bytes:
        # Retry only once the next refresh window opens.
        with self._lock:
            if self._content is None:
                if not self.local_path.is_file():
                    raise CacheError(
                        f"{self.url} is unreachable and no local copy exists at {self.local_path}"
                    ) from cause
                log.warning("Serving local copy %s", self.local_path)
                self._content = self.local_path.read_bytes()
            self._fetched_at = time.monotonic()
            return self._content


def descriptor_source(
    location: str,
    cache_file: Optional[Union[str, Path]] = None,
    *,
    refresh_seconds: float = 60,
) -> Callable[[], bytes]:
    """
    Return a callable producing the current descriptor bytes.

    http(s) locations go through a Cache; local paths are re-read on every
    call so edits take effect without a restart.
    """
    if location.startswith(("http://", "https://")):
        if not cache_file:
            cache_file = Path(tempfile.mkdtemp(prefix="clusterboot-")) / "localfile"
        return Cache(location, cache_file, refresh_seconds=refresh_seconds).get

    path = Path(location)

    def _read() -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise CacheError(f"cannot read {path}: {e}") from e

    return _read
