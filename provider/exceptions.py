class ProviderError(Exception):
    """
    Custom exception thrown when a resource operation fails. The message
    carries the context of the failing call, e.g.
    "error creating DMS RabbitMQ instance: ...".
    """


class ConfigError(ProviderError):
    """
    Custom exception thrown when there is an unrecoverable provider
    configuration error.
    """


class ValidationError(ProviderError):
    """
    Custom exception thrown when a resource configuration does not match the
    resource schema.
    """

    def __init__(self, address, errors):
        self.address = address
        self.errors = list(errors)
        details = "\n".join(f"  * {e}" for e in self.errors)
        super(ValidationError, self).__init__(
            f"invalid configuration for {address}:\n{details}"
        )


class AttributeSetError(ProviderError):
    """
    Custom exception thrown when a value can not be stored in an attribute.
    """


class MultiError(ProviderError):
    """Collects several errors and reports them together.

    Example:
        m_err = MultiError()
        m_err.append(err)
        m_err.raise_if_any("failed to set attributes")
    """

    def __init__(self, errors=None):
        self.errors = []
        for e in errors or []:
            self.append(e)
        super(MultiError, self).__init__()

    def append(self, *errors):
        for err in errors:
            if err is None:
                continue
            if isinstance(err, MultiError):
                self.errors.extend(err.errors)
            else:
                self.errors.append(err)
        return self

    def __len__(self):
        return len(self.errors)

    def __bool__(self):
        return bool(self.errors)

    def __str__(self):
        if len(self.errors) == 1:
            return f"1 error occurred:\n\t* {self.errors[0]}\n"
        details = "\n".join(f"\t* {e}" for e in self.errors)
        return f"{len(self.errors)} errors occurred:\n{details}\n"

    def error_or_none(self):
        """Return self when errors were collected, None otherwise."""
        return self if self.errors else None

    def raise_if_any(self, message):
        """Raise a ProviderError prefixed with message when errors were collected."""
        if self.errors:
            raise ProviderError(f"{message}: {self}") from self


class WaitTimeoutError(ProviderError):
    """
    Custom exception thrown when a resource does not reach the expected state
    within the allowed time.
    """

    def __init__(self, last_state, expected, timeout, last_error=None):
        self.last_state = last_state
        self.expected = list(expected)
        self.timeout = timeout
        self.last_error = last_error
        msg = (
            f"timeout while waiting for state to become '{', '.join(self.expected)}' "
            f"(last state: '{last_state}', timeout: {timeout}s)"
        )
        if last_error:
            msg += f": {last_error}"
        super(WaitTimeoutError, self).__init__(msg)


class UnexpectedStateError(ProviderError):
    """
    Custom exception thrown when a resource reaches a failure state, or a
    state that is neither pending nor expected.
    """

    def __init__(self, state, expected):
        self.state = state
        self.expected = list(expected)
        super(UnexpectedStateError, self).__init__(
            f"unexpected state '{state}', wanted target '{', '.join(self.expected)}'"
        )


class StateNotFoundError(ProviderError):
    """
    Custom exception thrown when the polled resource could not be found for
    too many consecutive refreshes.
    """

    def __init__(self, retries):
        self.retries = retries
        super(StateNotFoundError, self).__init__(
            f"couldn't find resource ({retries} retries)"
        )
