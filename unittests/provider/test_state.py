import pytest

from provider.exceptions import (
    StateNotFoundError,
    UnexpectedStateError,
    WaitTimeoutError,
)
from provider.state import StateChangeConf


def refresh_from(*results):
    results = list(results)

    def _refresh():
        result = results.pop(0) if len(results) > 1 else results[0]
        if isinstance(result, Exception):
            raise result
        return result

    return _refresh


def test_reaches_target(fake_time):
    conf = StateChangeConf(
        pending=["CREATING"],
        target=["RUNNING"],
        refresh=refresh_from(("i", "CREATING"), ("i", "CREATING"), ("i", "RUNNING")),
        timeout=600,
        delay=300,
        min_timeout=10,
        poll_interval=15,
    )

    assert conf.wait_for_state() == "i"
    assert fake_time.sleeps == [300, 15, 15]


def test_backoff_without_poll_interval(fake_time):
    conf = StateChangeConf(
        pending=["EXTENDING"],
        target=["RUNNING"],
        refresh=refresh_from(*[("i", "EXTENDING")] * 6 + [("i", "RUNNING")]),
        timeout=600,
        min_timeout=1,
    )

    conf.wait_for_state()
    assert fake_time.sleeps == [1, 2, 4, 8, 10, 10]


def test_failure_state(fake_time):
    conf = StateChangeConf(
        pending=["CREATING"],
        target=["RUNNING"],
        failure=["CREATEFAILED"],
        refresh=refresh_from(("i", "CREATING"), ("i", "CREATEFAILED")),
        timeout=600,
    )

    with pytest.raises(UnexpectedStateError) as e:
        conf.wait_for_state()
    assert e.value.state == "CREATEFAILED"


def test_unknown_state(fake_time):
    conf = StateChangeConf(
        pending=["CREATING"],
        target=["RUNNING"],
        refresh=refresh_from(("i", "FROZEN")),
        timeout=600,
    )

    with pytest.raises(UnexpectedStateError):
        conf.wait_for_state()


def test_timeout(fake_time):
    conf = StateChangeConf(
        pending=["DELETING"],
        target=["DELETED"],
        refresh=refresh_from(("i", "DELETING")),
        timeout=100,
        delay=90,
        poll_interval=15,
    )

    with pytest.raises(WaitTimeoutError) as e:
        conf.wait_for_state()
    assert e.value.last_state == "DELETING"
    assert fake_time.now <= 100


def test_not_found_limit(fake_time):
    conf = StateChangeConf(
        pending=["CREATING"],
        target=["RUNNING"],
        refresh=refresh_from((None, "")),
        timeout=3600,
        poll_interval=1,
        not_found_checks=3,
    )

    with pytest.raises(StateNotFoundError):
        conf.wait_for_state()


def test_not_found_without_target(fake_time):
    conf = StateChangeConf(
        pending=["DELETING"],
        target=[],
        refresh=refresh_from((None, "")),
        timeout=60,
    )

    assert conf.wait_for_state() is None


def test_continuous_target_occurence(fake_time):
    conf = StateChangeConf(
        pending=["PENDING"],
        target=["RUNNING"],
        refresh=refresh_from(
            ("i", "RUNNING"), ("i", "PENDING"), ("i", "RUNNING"), ("i", "RUNNING")
        ),
        timeout=600,
        poll_interval=5,
        continuous_target_occurence=2,
    )

    conf.wait_for_state()
    assert len(fake_time.sleeps) == 3


def test_refresh_error_propagates(fake_time):
    conf = StateChangeConf(
        pending=["EXTENDING"],
        target=["RUNNING"],
        refresh=refresh_from(KeyError("boom")),
        timeout=600,
    )

    with pytest.raises(KeyError):
        conf.wait_for_state()
