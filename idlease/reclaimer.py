import logging
import threading

logger = logging.getLogger(__name__)


class Reclaimer:
    """Periodically sweeps expired leases back into the free pool."""

    def __init__(self, allocator, interval_ms: int):
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")
        self.allocator = allocator
        self.interval_ms = interval_ms
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        return self.allocator.sweep()

    def start(self):
        """Start sweeping in a daemon thread."""
        if self.running:
            return
        self._stop_event.clear()

        def sweep_loop():
            # Wait first: a fresh table has nothing to reclaim.
            while not self._stop_event.wait(self.interval_ms / 1000):
                try:
                    self.run_once()
                except Exception:
                    logger.exception("Lease sweep failed")

        self._thread = threading.Thread(target=sweep_loop, name="idlease-reclaimer", daemon=True)
        self._thread.start()
        logger.info("Reclaimer started (every %d ms)", self.interval_ms)

    def stop(self, timeout: float | None = None):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Reclaimer did not stop within %s s", timeout)
                return
            self._thread = None
            logger.info("Reclaimer stopped")
