"""Request authentication for the vendor API.

Two schemes are supported: permanent/temporary access keys signed with the
``SDK-HMAC-SHA256`` algorithm, and a pre-issued IAM token passed through the
``X-Auth-Token`` header.
"""

import hashlib
import hmac
from datetime import datetime, timezone
from urllib.parse import parse_qsl, quote, unquote, urlsplit

from requests.auth import AuthBase

ALGORITHM = "SDK-HMAC-SHA256"
DATE_FORMAT = "%Y%m%dT%H%M%SZ"
HEADER_DATE = "X-Sdk-Date"
HEADER_CONTENT_SHA256 = "x-sdk-content-sha256"
HEADER_SECURITY_TOKEN = "X-Security-Token"


def _encode(value):
    return quote(value, safe="~")


def _sha256_hex(data):
    if data is None:
        data = b""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def canonical_uri(path):
    """Return the canonical form of the request path, always '/' terminated."""
    parts = [_encode(p) for p in unquote(path).split("/")]
    uri = "/".join(parts)
    if not uri.endswith("/"):
        uri += "/"
    return uri


def canonical_query_string(query):
    """Return the sorted, encoded query string."""
    params = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, []).append(value)

    pairs = []
    for key in sorted(params):
        for value in sorted(params[key]):
            pairs.append(f"{_encode(key)}={_encode(value)}")
    return "&".join(pairs)


def signed_headers(headers):
    return sorted(k.lower() for k in headers.keys())


def canonical_headers(headers, signed):
    lowered = {k.lower(): v.strip() for k, v in headers.items()}
    return "".join(f"{k}:{lowered[k]}\n" for k in signed)


def canonical_request(method, url, headers, body):
    """Build the canonical request the signature is computed over."""
    parts = urlsplit(url)
    signed = signed_headers(headers)
    content_hash = headers.get(HEADER_CONTENT_SHA256) or _sha256_hex(body)
    return "\n".join(
        [
            method.upper(),
            canonical_uri(parts.path),
            canonical_query_string(parts.query),
            canonical_headers(headers, signed),
            ";".join(signed),
            content_hash,
        ]
    )


def string_to_sign(request, sdk_date):
    return "\n".join([ALGORITHM, sdk_date, _sha256_hex(request)])


def sign(secret_key, data):
    return hmac.new(
        secret_key.encode("utf-8"), data.encode("utf-8"), hashlib.sha256
    ).hexdigest()


class AKSKAuth(AuthBase):
    """Sign every prepared request with an access key / secret key pair."""

    def __init__(self, access_key, secret_key, security_token=None, clock=None):
        self.access_key = access_key
        self.secret_key = secret_key
        self.security_token = security_token
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def __call__(self, r):
        sdk_date = self._clock().strftime(DATE_FORMAT)
        r.headers[HEADER_DATE] = sdk_date
        r.headers["Host"] = urlsplit(r.url).netloc
        if self.security_token:
            r.headers[HEADER_SECURITY_TOKEN] = self.security_token

        # only the headers known at signing time are part of the signature
        headers = {k: v for k, v in r.headers.items() if k.lower() != "authorization"}
        request = canonical_request(r.method, r.url, headers, r.body)
        signature = sign(self.secret_key, string_to_sign(request, sdk_date))

        r.headers["Authorization"] = (
            f"{ALGORITHM} Access={self.access_key}, "
            f"SignedHeaders={';'.join(signed_headers(headers))}, "
            f"Signature={signature}"
        )
        return r


class TokenAuth(AuthBase):
    """Attach a pre-issued IAM token to every request."""

    def __init__(self, token):
        self.token = token

    def __call__(self, r):
        r.headers["X-Auth-Token"] = self.token
        return r
