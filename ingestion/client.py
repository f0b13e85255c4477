"""
Process-wide handle on the target store client
"""

import logging
import threading
from typing import Optional

import httpx

from core.config import settings

logger = logging.getLogger(__name__)


class ClientHolder:
    """Lazily creates one HTTP client per process and closes it on shutdown"""

    def __init__(self, timeout: float = settings.REQUEST_TIMEOUT):
        self.timeout = timeout
        self._lock = threading.Lock()
        self._client: Optional[httpx.Client] = None

    def get(self, options) -> httpx.Client:
        with self._lock:
            if self._client is None:
                logger.info(f"Connecting to target store at {options.host} (graph {options.graph})")
                self._client = httpx.Client(base_url=options.host, timeout=self.timeout)
            return self._client

    @property
    def connected(self) -> bool:
        return self._client is not None

    def close(self) -> None:
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None


client_holder = ClientHolder()
