"""Key/value store of locks.

Operations that mutate a shared allocation pool (e.g. all DMS instances of a
project) take the lock of their key for the whole create or update.
"""

import threading
from contextlib import contextmanager

from utility.log import Log

LOG = Log(__name__)


class MutexKV(object):
    """A simple key/value store for arbitrary mutexes."""

    def __init__(self):
        self._lock = threading.Lock()
        self._store = {}

    def get(self, key):
        """Return the mutex of a key, creating it on first use."""
        with self._lock:
            mutex = self._store.get(key)
            if mutex is None:
                mutex = threading.Lock()
                self._store[key] = mutex
            return mutex

    def lock(self, key):
        LOG.debug(f"Locking {key}")
        self.get(key).acquire()
        LOG.debug(f"Locked {key}")

    def unlock(self, key):
        LOG.debug(f"Unlocking {key}")
        self.get(key).release()
        LOG.debug(f"Unlocked {key}")

    @contextmanager
    def locked(self, key):
        self.lock(key)
        try:
            yield
        finally:
            self.unlock(key)


MUTEX_KV = MutexKV()
