"""
Transport backed by a requests Session.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, Mapping, Optional

import requests

from .base import Transport


logger = logging.getLogger(__name__)


SESSION_SEND_OPTIONS = ("timeout", "verify", "cert", "proxies", "stream", "allow_redirects")


class RequestsTransport(Transport):
    """
    Send prepared messages through a shared requests Session.

    Asynchronous sends run on a thread pool owned by the transport.

    Supports:
    - Per-request timeout, verify, cert, proxies, stream and redirect options
    - A default timeout when the request config has none
    """

    def __init__(
        self,
        max_workers: int = 10,
        timeout: Optional[float] = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the transport.

        Args:
            max_workers: Thread pool size for asynchronous sends
            timeout: Default timeout in seconds (None = no timeout)
            session: Optional session to use instead of a new one
        """
        self.max_workers = max_workers
        self.timeout = timeout
        self.session = session or requests.Session()
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()

    def _send_options(self, config: Mapping[str, Any]) -> Dict[str, Any]:
        options = {key: config[key] for key in SESSION_SEND_OPTIONS if key in config}
        options.setdefault("timeout", self.timeout)
        return options

    def send(self, message: requests.PreparedRequest, config: Mapping[str, Any]) -> requests.Response:
        start_time = time.time()
        response = self.session.send(message, **self._send_options(config))
        duration_ms = int((time.time() - start_time) * 1000)

        logger.debug(
            f"{message.method} {message.url} -> {response.status_code} in {duration_ms}ms"
        )
        return response

    def send_async(self, message: requests.PreparedRequest, config: Mapping[str, Any]) -> Future:
        return self._get_executor().submit(self.send, message, dict(config))

    def _get_executor(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix="outbound-sender",
                )
            return self._executor

    def close(self) -> None:
        """Shut down the thread pool and close the session."""
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=True)
                self._executor = None
        if self.session:
            self.session.close()
