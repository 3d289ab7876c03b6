import mock
import pytest


class FakeTime(object):
    """Replaces the time module of the poller, sleeping advances the clock."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def monotonic(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_time():
    clock = FakeTime()
    with mock.patch("provider.state.time", clock):
        yield clock


@pytest.fixture
def cfg():
    """Provider configuration whose service clients are mocks."""
    _cfg = mock.Mock()
    _cfg.region = "cn-north-4"
    _cfg.get_region.return_value = "cn-north-4"
    _cfg.get_enterprise_project_id.return_value = "0"
    return _cfg
