import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import List, Optional

import requests

logger = logging.getLogger(__name__)


class DecodedPublisher:
    """
    Forwards decoded strings to the backend scan log.
    """
    def __init__(self, base_url: str, path: str = "/api/scans", timeout_seconds: int = 2, session=None):
        self.url = base_url.rstrip("/") + path
        self.timeout = timeout_seconds
        self.http = session or requests.Session()

    def publish(self, strings: List[str], camera_position: Optional[str] = None):
        payload = {
            "strings": list(strings),
            "camera_position": camera_position,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        r = self.http.post(self.url, json=payload, timeout=self.timeout)
        r.raise_for_status()
        return r.json()


class BackgroundPublisher:
    """
    Runs DecodedPublisher.publish on one worker thread so the scanner's
    decode worker never waits on HTTP. At most `max_pending` reports wait
    for the worker; beyond that new reports are dropped. Failures are logged.
    """
    def __init__(self, publisher: DecodedPublisher, max_pending: int = 32):
        self.publisher = publisher
        self.max_pending = max(1, int(max_pending))
        self.dropped = 0
        self._pending = 0
        self._lock = threading.Lock()
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="qr-publish")

    def submit(self, strings: List[str], camera_position: Optional[str] = None) -> Optional[Future]:
        with self._lock:
            if self._pending >= self.max_pending:
                self.dropped += 1
                logger.warning("Publish backlog full, dropping %d string(s)", len(strings))
                return None
            self._pending += 1
        return self._pool.submit(self._run, list(strings), camera_position)

    def _run(self, strings, camera_position):
        try:
            return self.publisher.publish(strings, camera_position=camera_position)
        except requests.RequestException as ex:
            logger.warning("Publish failed: %s", ex)
            return None
        finally:
            with self._lock:
                self._pending -= 1

    def close(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)
