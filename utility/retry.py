import time
from functools import wraps

from utility.log import Log

logger = Log(__name__)


def retry(exception_to_check, tries=4, delay=3, backoff=2, max_delay=None):
    """
    Call the decorated function again when it raises exception_to_check.

    The last attempt lets the exception through.

    Args:
        exception_to_check: exception class or tuple of classes to retry on
        tries: attempts before giving up
        delay: seconds to wait after the first failure
        backoff: multiplier applied to the wait after each failure
        max_delay: upper bound of the wait
    """

    def deco_retry(f):
        @wraps(f)
        def f_retry(*args, **kwargs):
            wait = delay
            for attempt in range(1, tries):
                try:
                    return f(*args, **kwargs)
                except exception_to_check as e:
                    logger.warning(
                        f"{f.__qualname__} attempt {attempt}/{tries} failed with "
                        f"{type(e).__name__}: {e}, retrying in {wait}s"
                    )
                time.sleep(wait)
                wait = wait * backoff
                if max_delay is not None:
                    wait = min(wait, max_delay)
            return f(*args, **kwargs)

        return f_retry

    return deco_retry
