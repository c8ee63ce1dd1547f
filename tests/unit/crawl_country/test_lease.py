"""Tests for crawl_country.lease module."""

import threading
import time
from unittest.mock import MagicMock

from crawl_country.lease import LeaseRenewer


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestLeaseRenewer:
    def test_renews_until_stopped(self) -> None:
        receiver = MagicMock()
        renewer = LeaseRenewer(receiver, interval_seconds=0.01).start()

        assert _wait_for(lambda: receiver.renew_lease.call_count >= 3)
        renewer.stop(timeout=2)

        calls = receiver.renew_lease.call_count
        time.sleep(0.05)
        assert receiver.renew_lease.call_count == calls
        assert renewer.renewals == calls
        receiver.close.assert_called_once()

    def test_renewal_failure_does_not_stop_loop(self) -> None:
        receiver = MagicMock()
        failures = [RuntimeError("throttled")]

        def renew() -> None:
            if failures:
                raise failures.pop()

        receiver.renew_lease.side_effect = renew
        renewer = LeaseRenewer(receiver, interval_seconds=0.01).start()

        assert _wait_for(lambda: receiver.renew_lease.call_count >= 3)
        renewer.stop(timeout=2)

        assert renewer.renewals == receiver.renew_lease.call_count - 1

    def test_cancel_before_start_never_renews(self) -> None:
        receiver = MagicMock()
        cancel = threading.Event()
        cancel.set()

        renewer = LeaseRenewer(receiver, cancel, interval_seconds=0.01).start()
        renewer.join(timeout=2)

        receiver.renew_lease.assert_not_called()
        receiver.close.assert_called_once()

    def test_external_cancel_ends_loop(self) -> None:
        receiver = MagicMock()
        cancel = threading.Event()
        renewer = LeaseRenewer(receiver, cancel, interval_seconds=30).start()

        assert _wait_for(lambda: receiver.renew_lease.call_count == 1)
        cancel.set()
        renewer.join(timeout=2)

        assert receiver.renew_lease.call_count == 1
        receiver.close.assert_called_once()

    def test_close_failure_is_logged_not_raised(self) -> None:
        receiver = MagicMock()
        receiver.close.side_effect = RuntimeError("already closed")
        renewer = LeaseRenewer(receiver, interval_seconds=0.01).start()

        renewer.stop(timeout=2)

        receiver.close.assert_called_once()
