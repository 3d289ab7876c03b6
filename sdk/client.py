"""
Python module for building service endpoints and executing REST calls against
the vendor API.
"""

import json
import re
from urllib.parse import urlsplit, urlunsplit

import requests

from sdk.exceptions import (
    InvalidURLError,
    ServiceUnavailableError,
    TooManyRequestsError,
    error_for_status,
)
from utility.log import Log
from utility.retry import retry

LOG = Log(__name__)

USER_AGENT = "hwcloud-provider-python"
DEFAULT_TIMEOUT = 60

# Retried on top of the status code check: throttling and dropped connections.
RETRY_EXCEPTIONS = (
    requests.ConnectionError,
    requests.Timeout,
    TooManyRequestsError,
    ServiceUnavailableError,
)

DEFAULT_OK_CODES = {
    "GET": (200,),
    "POST": (200, 201, 202),
    "PUT": (200, 201, 202, 204),
    "PATCH": (200, 202, 204),
    "DELETE": (200, 202, 204),
}

_VERSION_SEGMENT = re.compile(r"(?:^|/)v[0-9.]+(?:/|$)")


def normalize_url(url):
    """Ensure the URL ends with a single '/' so that paths can be appended."""
    return url if url.endswith("/") else url + "/"


def base_endpoint(endpoint):
    """Strip the API version (and everything after it) from an endpoint.

    Examples:
        https://ims.cn-north-4.myhuaweicloud.com/v2/ -> https://ims.cn-north-4.myhuaweicloud.com/
        https://host/image/v2.1/images -> https://host/image/
        ims.cn-north-4.myhuaweicloud.com/v2 -> ims.cn-north-4.myhuaweicloud.com/

    Query and fragment are dropped.

    Raises:
        InvalidURLError     when the endpoint cannot be parsed
    """
    try:
        parts = urlsplit(endpoint)
    except ValueError as e:
        raise InvalidURLError(f"Invalid endpoint '{endpoint}': {e}") from e

    path = parts.path
    match = _VERSION_SEGMENT.search(path)
    if match:
        path = path[: match.start() + 1]

    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def _parse_error(body):
    """Return (error_code, error_msg) from the vendor error body formats."""
    try:
        data = json.loads(body)
    except (TypeError, ValueError):
        return None, None

    if not isinstance(data, dict):
        return None, None

    if "error_code" in data:
        return data.get("error_code"), data.get("error_msg")

    error = data.get("error")
    if isinstance(error, dict):
        return error.get("code") or error.get("error_code"), error.get(
            "message"
        ) or error.get("error_msg")

    return data.get("code"), data.get("message")


class ProviderClient(object):
    """Authenticated HTTP session shared by all service clients of a region."""

    def __init__(
        self,
        auth,
        region,
        project_id=None,
        domain_id=None,
        insecure=False,
        timeout=DEFAULT_TIMEOUT,
        user_agent=USER_AGENT,
    ):
        """
        Args:
            auth (requests.auth.AuthBase): request signer or token handler
            region (str): region the session is scoped to
            project_id (str): project id of the region, sent as X-Project-Id
            domain_id (str): account id, needed by global services
            insecure (bool): skip TLS certificate verification
            timeout (int): socket timeout of a single request in seconds
            user_agent (str): value of the User-Agent header
        """
        self.region = region
        self.project_id = project_id
        self.domain_id = domain_id
        self.timeout = timeout

        self.session = requests.Session()
        self.session.auth = auth
        self.session.verify = not insecure
        self.session.headers.update(
            {
                "User-Agent": user_agent,
                "Accept": "application/json",
            }
        )

        if insecure:
            requests.packages.urllib3.disable_warnings()

    @retry(RETRY_EXCEPTIONS, tries=4, delay=5, backoff=2, max_delay=30)
    def request(
        self,
        method,
        url,
        json_body=None,
        params=None,
        headers=None,
        ok_codes=None,
        raw=False,
    ):
        """Send a request and validate the returned status code.

        Args:
            method (str): HTTP verb
            url (str): absolute request URL
            json_body (dict|list): payload, serialized as JSON
            params (dict): query string parameters, None values are dropped
            headers (dict): additional request headers
            ok_codes (tuple): accepted status codes, verb defaults when None
            raw (bool): return the requests.Response instead of decoded JSON

        Returns:
            decoded JSON body ({} for an empty body) or requests.Response

        Raises:
            HTTPError subclass matching the returned status code
        """
        method = method.upper()
        ok_codes = ok_codes or DEFAULT_OK_CODES.get(method, (200,))

        _headers = {}
        if self.project_id:
            _headers["X-Project-Id"] = self.project_id
        if json_body is not None:
            _headers["Content-Type"] = "application/json;charset=UTF-8"
        _headers.update(headers or {})

        if params:
            params = {k: v for k, v in params.items() if v not in (None, "")}

        data = None
        if json_body is not None:
            data = (
                json_body
                if isinstance(json_body, (str, bytes))
                else json.dumps(json_body)
            )

        LOG.debug(f"Request {method} {url} params={params} body={json_body}")
        response = self.session.request(
            method,
            url,
            params=params,
            data=data,
            headers=_headers,
            timeout=self.timeout,
        )
        LOG.debug(f"Response {response.status_code} for {method} {url}")

        if response.status_code not in ok_codes:
            error_code, error_msg = _parse_error(response.text)
            raise error_for_status(response.status_code)(
                response.status_code,
                method,
                url,
                body=response.text,
                error_code=error_code,
                error_msg=error_msg,
            )

        if raw:
            return response

        if response.status_code == requests.codes.NO_CONTENT or not response.content:
            return {}

        return response.json()


class ServiceClient(object):
    """Client bound to one service endpoint of the vendor API."""

    def __init__(self, provider, endpoint, resource_base=None, service_type=""):
        """
        Args:
            provider (ProviderClient): authenticated session
            endpoint (str): service root, e.g. https://dms.cn-north-4.myhuaweicloud.com/
            resource_base (str): root for resource URLs, defaults to the endpoint
            service_type (str): catalog name of the service, used in messages
        """
        self.provider = provider
        self.endpoint = normalize_url(endpoint)
        self.resource_base = normalize_url(resource_base or endpoint)
        self.service_type = service_type

    def __repr__(self):
        return f"<ServiceClient {self.service_type} {self.resource_base}>"

    @property
    def project_id(self):
        return self.provider.project_id

    @property
    def region(self):
        return self.provider.region

    def service_url(self, *parts):
        """Return the URL of a resource path below the resource base."""
        return self.resource_base + "/".join(parts)

    def root_url(self, *parts):
        """Return the URL of a path below the service endpoint."""
        return self.endpoint + "/".join(parts)

    def get(self, url, **kwargs):
        return self.provider.request("GET", url, **kwargs)

    def post(self, url, json_body=None, **kwargs):
        return self.provider.request("POST", url, json_body=json_body, **kwargs)

    def put(self, url, json_body=None, **kwargs):
        return self.provider.request("PUT", url, json_body=json_body, **kwargs)

    def patch(self, url, json_body=None, **kwargs):
        return self.provider.request("PATCH", url, json_body=json_body, **kwargs)

    def delete(self, url, **kwargs):
        return self.provider.request("DELETE", url, **kwargs)
