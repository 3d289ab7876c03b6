"""Helpers shared by the resources of every service."""

from provider.exceptions import ProviderError
from provider.schema import Schema, ValueType
from sdk.exceptions import NotFoundError
from utility.log import Log

LOG = Log(__name__)


def tags_schema():
    """Return the schema of the ``tags`` key/value map."""
    return Schema(ValueType.MAP, optional=True, elem=Schema(ValueType.STRING))


def check_deleted(d, err, msg):
    """
    Clear the resource ID when the error is a 404, otherwise re-raise it.

    A resource removed outside of the provider is then dropped from the state
    instead of failing the read (or a repeated delete).

    Args:
        d (ResourceData): data of the resource being read or deleted
        err (Exception): error raised by the SDK call
        msg (str): context of the failing call, e.g. "DMS RabbitMQ instance"

    Raises:
        ProviderError   for every error other than a 404
    """
    if isinstance(err, NotFoundError):
        LOG.warning(f"Removing {msg} {d.id} because it's gone")
        d.set_id("")
        return

    raise ProviderError(f"{msg}: {err}") from err
