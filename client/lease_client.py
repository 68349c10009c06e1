import logging
import threading
from typing import Callable, Optional, Tuple

import requests

logger = logging.getLogger(__name__)


class LeaseClientError(Exception):
    """The server refused a request (pool exhausted, id not leased, ...)."""

    def __init__(self, code: int, msg: str, status: int):
        super().__init__(f"{msg} (code {code}, HTTP {status})")
        self.code = code
        self.msg = msg
        self.status = status


class LeaseClient:
    """Thin HTTP client for an idlease server."""

    def __init__(self, base_url: str, timeout: float = 2.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def next(self) -> Tuple[int, int]:
        """
        Lease a fresh id.
        Returns: (id, expiry in unix ms)
        """
        data = self._get("/next")
        return int(data["id"]), int(data["exp"])

    def heartbeat(self, lease_id: int) -> int:
        """Renew a held id. Returns the new expiry in unix ms."""
        data = self._get(f"/heartbeat/{lease_id}")
        return int(data["exp"])

    def _get(self, path: str) -> dict:
        try:
            resp = requests.get(f"{self.base_url}{path}", timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise RuntimeError(f"Request to {path} failed: {e}") from e

        if resp.status_code == 200:
            return resp.json()

        try:
            error = resp.json().get("error", {})
        except ValueError:
            error = {}
        raise LeaseClientError(error.get("code", 0), error.get("msg", resp.text), resp.status_code)


class LeaseKeeper:
    """Acquires one id and keeps it alive with periodic heartbeats.

    If the server rejects a heartbeat the id is considered lost: the keeper
    stops and calls ``on_lost(id, error)``. It never switches to a new id on
    its own, since callers may already have embedded the old one.
    """

    def __init__(
        self,
        client: LeaseClient,
        interval_ms: int,
        on_lost: Optional[Callable[[int, Exception], None]] = None,
    ):
        self.client = client
        self.interval_ms = interval_ms
        self.on_lost = on_lost
        self.id: Optional[int] = None
        self.expires_at: Optional[int] = None
        self.lost = threading.Event()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> int:
        """Lease an id and start heartbeating it. Returns the id."""
        self.id, self.expires_at = self.client.next()
        self.lost.clear()
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._heartbeat_loop, daemon=True)
        self._thread.start()
        logger.info(f"Holding id {self.id}")
        return self.id

    def stop(self, timeout: Optional[float] = None):
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        self._thread = None

    def beat(self) -> bool:
        """Send one heartbeat. Returns False once the id is lost."""
        try:
            self.expires_at = self.client.heartbeat(self.id)
            return True
        except LeaseClientError as e:
            logger.error(f"Lost id {self.id}: {e}")
            self.lost.set()
            if self.on_lost is not None:
                self.on_lost(self.id, e)
            return False
        except RuntimeError as e:
            # Transport trouble; retry on the next tick while the lease may still be live.
            logger.warning(f"Heartbeat for id {self.id} failed: {e}")
            return True

    def _heartbeat_loop(self):
        while not self._stop_event.wait(self.interval_ms / 1000):
            if not self.beat():
                self._stop_event.set()
