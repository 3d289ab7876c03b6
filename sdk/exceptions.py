"""This module defines the exceptions raised by the vendored SDK."""


class SDKError(Exception):
    """Base class for any SDK error."""


class ConfigError(SDKError):
    """
    Custom exception thrown when the client can not be built from the given
    credentials or endpoint configuration.
    """


class InvalidURLError(SDKError):
    """Custom exception thrown when an endpoint or link can not be parsed."""


class HTTPError(SDKError):
    """Base class for HTTP errors.

    Attributes:
        status_code (int): HTTP status returned by the service
        method (str): request method
        url (str): request URL
        body (str): raw response body
        error_code (str): vendor error code parsed from the body, if any
        error_msg (str): vendor error message parsed from the body, if any
    """

    def __init__(self, status_code, method, url, body="", error_code=None, error_msg=None):
        self.status_code = status_code
        self.method = method
        self.url = url
        self.body = body
        self.error_code = error_code
        self.error_msg = error_msg

        detail = f"{error_code}: {error_msg}" if error_code else body
        super(HTTPError, self).__init__(
            f"Bad request with: [{method} {url}], error message: [{status_code}] {detail}"
        )


# Exception for status code `400`
class BadRequestError(HTTPError):
    pass


# Exception for status code `401`
class UnauthorizedError(HTTPError):
    pass


# Exception for status code `403`
class ForbiddenError(HTTPError):
    pass


# Exception for status code `404`
class NotFoundError(HTTPError):
    pass


# Exception for status code `409`
class ConflictError(HTTPError):
    pass


# Exception for status code `429`
class TooManyRequestsError(HTTPError):
    pass


# Exception for status code `500`
class InternalServerError(HTTPError):
    pass


# Exception for status code `503`
class ServiceUnavailableError(HTTPError):
    pass


ERROR_BY_STATUS = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    429: TooManyRequestsError,
    500: InternalServerError,
    503: ServiceUnavailableError,
}


def error_for_status(status_code):
    """Return the exception class raised for an unexpected status code."""
    return ERROR_BY_STATUS.get(status_code, HTTPError)
