"""Background renewal of a queue message lease while a crawl runs."""

import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class LeaseRenewer:
    """
    Keep renewing a receiver's lease until the cancellation event is set.

    The receiver must provide renew_lease() and close(). Renewal failures
    are logged and the loop continues; the receiver is closed when the loop
    exits. After stop() returns no further renewal is made.
    """

    def __init__(
        self,
        receiver,
        cancel: Optional[threading.Event] = None,
        interval_seconds: float = 30.0,
    ):
        self.receiver = receiver
        self.cancel = cancel or threading.Event()
        self.interval_seconds = interval_seconds
        self.renewals = 0
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "LeaseRenewer":
        self._thread = threading.Thread(target=self._run, name="lease-renewer", daemon=True)
        self._thread.start()
        return self

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal cancellation and wait for the renewer to release the receiver."""
        with self._lock:
            self.cancel.set()
        self.join(timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        try:
            while True:
                with self._lock:
                    if self.cancel.is_set():
                        break
                    self._renew()
                self.cancel.wait(self.interval_seconds)
        finally:
            self._close_receiver()

    def _renew(self) -> None:
        try:
            self.receiver.renew_lease()
            self.renewals += 1
        except Exception as e:
            logger.warning("Error renewing message lease: %s", e)

    def _close_receiver(self) -> None:
        try:
            self.receiver.close()
        except Exception as e:
            logger.warning("Error closing queue receiver: %s", e)
