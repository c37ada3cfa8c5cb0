"""Unit tests for the rate-limit monitor."""

from finsync.domain.sync.services import RateLimitMonitor
from finsync.domain.sync.value_objects import NetworkEvent, NetworkEventKind


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestRateLimitMonitor:
    def setup_method(self):
        self.clock = FakeClock()
        self.monitor = RateLimitMonitor(clock=self.clock)

    def test_wait_is_tracked_with_remaining_time(self):
        wait = self.monitor.observe(
            NetworkEvent(kind=NetworkEventKind.RATE_LIMIT_WAIT, seconds=30),
        )

        assert wait is not None
        assert wait.message == "Rate limit wait..."
        self.clock.now += 10
        assert self.monitor.remaining_seconds() == 20

    def test_remaining_never_goes_negative(self):
        self.monitor.observe(NetworkEvent(kind=NetworkEventKind.RETRY_WAIT, seconds=5))
        self.clock.now += 60

        assert self.monitor.remaining_seconds() == 0.0

    def test_new_wait_replaces_previous(self):
        self.monitor.observe(
            NetworkEvent(kind=NetworkEventKind.RATE_LIMIT_WAIT, seconds=30),
        )
        self.monitor.observe(
            NetworkEvent(kind=NetworkEventKind.RETRY_WAIT, seconds=5, message="again"),
        )

        assert self.monitor.current_wait.kind is NetworkEventKind.RETRY_WAIT
        assert self.monitor.current_wait.message == "again"

    def test_request_clears_wait(self):
        self.monitor.observe(
            NetworkEvent(kind=NetworkEventKind.RATE_LIMIT_WAIT, seconds=30),
        )
        self.monitor.observe(NetworkEvent(kind=NetworkEventKind.REQUEST))

        assert self.monitor.is_waiting is False
        assert self.monitor.remaining_seconds() == 0.0

    def test_network_log_is_newest_first_without_finish_markers(self):
        self.monitor.observe(NetworkEvent(kind=NetworkEventKind.REQUEST, url="/a"))
        self.monitor.observe(NetworkEvent(kind=NetworkEventKind.RESPONSE, status=200))
        self.monitor.observe(NetworkEvent(kind=NetworkEventKind.RATE_LIMIT_FINISHED))

        kinds = [e.kind for e in self.monitor.network_log]
        assert kinds == [NetworkEventKind.RESPONSE, NetworkEventKind.REQUEST]
