"""Helper object to wait for a remote resource to converge to a state.

The wait is a small state machine::

    {pending}* -> {target} | {failure} | timed out

A refresh function reports the current entity and its status on every
iteration. Accessors translate "not found" answers into a terminal status
(``DELETED``) so that delete waits can target it, and may fold ambiguous
statuses back into the pending set.
"""

import time

from provider.exceptions import (
    StateNotFoundError,
    UnexpectedStateError,
    WaitTimeoutError,
)
from utility.log import Log

LOG = Log(__name__)

# Poll intervals at or above this value are ignored in favour of the back-off.
MAX_POLL_INTERVAL = 180
MAX_BACKOFF = 10
INITIAL_BACKOFF = 0.1


class StateChangeConf(object):
    """Wait for a refreshed status to reach one of the target values.

    Args:
        pending (list): statuses allowed while waiting
        target (list): statuses that end the wait successfully
        refresh (callable): returns ``(entity, status)``; its exceptions
            propagate to the caller unchanged
        timeout (int): overall deadline in seconds, the initial delay included
        delay (int): seconds to wait before the first refresh
        min_timeout (int): floor of the back-off between two refreshes
        poll_interval (int): fixed interval between refreshes, overrides the
            back-off when set
        failure (list): statuses that end the wait with UnexpectedStateError
        not_found_checks (int): consecutive ``(None, "")`` refreshes tolerated
        continuous_target_occurence (int): consecutive target hits required
    """

    def __init__(
        self,
        pending,
        target,
        refresh,
        timeout,
        delay=0,
        min_timeout=0,
        poll_interval=0,
        failure=None,
        not_found_checks=20,
        continuous_target_occurence=1,
    ):
        self.pending = list(pending or [])
        self.target = list(target or [])
        self.refresh = refresh
        self.timeout = timeout
        self.delay = delay
        self.min_timeout = min_timeout
        self.poll_interval = poll_interval
        self.failure = list(failure or [])
        self.not_found_checks = not_found_checks
        self.continuous_target_occurence = max(continuous_target_occurence, 1)

    def _next_wait(self, wait, target_occurence):
        # exponential back-off, except while waiting for the target to reoccur
        if target_occurence == 0:
            wait *= 2

        if 0 < self.poll_interval < MAX_POLL_INTERVAL:
            return self.poll_interval

        if wait < self.min_timeout:
            return self.min_timeout
        return min(wait, MAX_BACKOFF)

    def wait_for_state(self):
        """Block until the target state, a failure state or the deadline.

        Returns:
            the entity returned by the last refresh

        Raises:
            WaitTimeoutError        the deadline elapsed first
            UnexpectedStateError    a failure (or unknown) status was reached
            StateNotFoundError      the entity kept missing
        """
        start = time.monotonic()
        deadline = start + self.timeout
        LOG.debug(f"Waiting for state to become: {self.target}")

        if self.delay:
            time.sleep(min(self.delay, self.timeout))

        wait = INITIAL_BACKOFF
        target_occurence = 0
        not_found = 0
        last_status = ""

        while True:
            if time.monotonic() >= deadline:
                raise WaitTimeoutError(last_status, self.target, self.timeout)

            entity, status = self.refresh()

            if entity is None and not status:
                # nothing was found; with no target this is what we waited for
                if not self.target:
                    return None

                not_found += 1
                if not_found > self.not_found_checks:
                    raise StateNotFoundError(not_found)
                target_occurence = 0
            else:
                not_found = 0
                last_status = status
                LOG.debug(f"Refreshed state: {status}")

                if status in self.target:
                    target_occurence += 1
                    if target_occurence >= self.continuous_target_occurence:
                        elapsed = int(time.monotonic() - start)
                        LOG.info(f"Reached state '{status}' in {elapsed} seconds")
                        return entity
                elif status in self.failure or status not in self.pending:
                    raise UnexpectedStateError(status, self.target)
                else:
                    target_occurence = 0

            wait = self._next_wait(wait, target_occurence)
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise WaitTimeoutError(last_status, self.target, self.timeout)

            LOG.debug(f"Waiting {wait} seconds before next refresh")
            time.sleep(min(wait, remaining))
