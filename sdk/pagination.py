"""Helpers to walk paginated list responses."""

from urllib.parse import urlsplit, urlunsplit

from sdk.client import base_endpoint, normalize_url
from sdk.exceptions import InvalidURLError
from utility.log import Log

LOG = Log(__name__)


def next_page_url(service_url, requested_next):
    """Build the full URL of the next page based on the current service URL.

    Services return the ``next`` link relative to their own root (for example
    ``/v2/images?marker=abc``), which does not match the endpoint the client
    talks to when a proxy or a versioned endpoint is configured. The link path
    is re-rooted on the normalized base endpoint and its query is preserved.

    Args:
        service_url (str): URL of the page that returned the link
        requested_next (str): value of the ``next`` link

    Returns:
        absolute URL of the next page

    Raises:
        InvalidURLError     when either URL can not be parsed
    """
    base = normalize_url(base_endpoint(service_url))

    try:
        requested = urlsplit(requested_next)
    except ValueError as e:
        raise InvalidURLError(f"Invalid next link '{requested_next}': {e}")

    next_path = base + requested.path.lstrip("/")
    parts = urlsplit(next_path)

    return urlunsplit((parts.scheme, parts.netloc, parts.path, requested.query, ""))


class LinkPager(object):
    """Iterate over the items of a list API that returns a ``next`` link.

    Example:
        for image in LinkPager(client, url, "images"):
            ...
    """

    def __init__(
        self, client, url, items_key, next_key="next", params=None, next_url=None
    ):
        self.client = client
        self.next_url = next_url or next_page_url
        self.url = url
        self.items_key = items_key
        self.next_key = next_key
        self.params = params

    def pages(self):
        url, params = self.url, self.params
        while url:
            body = self.client.get(url, params=params)
            yield body

            link = body.get(self.next_key)
            if not link:
                return

            # the link already carries the query of the next page
            url, params = self.next_url(url, link), None
            LOG.debug(f"Following next page link {url}")

    def __iter__(self):
        for page in self.pages():
            for item in page.get(self.items_key) or []:
                yield item


class OffsetPager(object):
    """Iterate over the items of a list API paginated with offset and limit."""

    def __init__(
        self,
        client,
        url,
        items_key,
        params=None,
        limit=100,
        total_key="total_count",
    ):
        self.client = client
        self.url = url
        self.items_key = items_key
        self.params = dict(params or {})
        self.limit = limit
        self.total_key = total_key

    def __iter__(self):
        offset, seen = 0, 0
        while True:
            params = dict(self.params, offset=offset, limit=self.limit)
            body = self.client.get(self.url, params=params)
            items = body.get(self.items_key) or []
            for item in items:
                yield item

            seen += len(items)
            total = body.get(self.total_key)
            if not items or len(items) < self.limit:
                return
            if total is not None and seen >= int(total):
                return
            offset += len(items)
