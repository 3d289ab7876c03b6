"""Resource tag API shared by several services.

The tag endpoints hang below the resource they belong to:
``{resource_base}/{resource_type}/{resource_id}/tags``.
"""

from typing import Dict, List

ACTION_CREATE = "create"
ACTION_DELETE = "delete"


def get_url(c, resource_type, resource_id):
    return c.service_url(resource_type, resource_id, "tags")


def action_url(c, resource_type, resource_id):
    return c.service_url(resource_type, resource_id, "tags", "action")


def get(client, resource_type: str, resource_id: str) -> List[Dict]:
    """Return the tags of a resource as a list of {"key", "value"} pairs."""
    body = client.get(get_url(client, resource_type, resource_id))
    return body.get("tags") or []


def _action(client, resource_type, resource_id, action, tags):
    client.post(
        action_url(client, resource_type, resource_id),
        json_body={"action": action, "tags": tags},
        ok_codes=(200, 204),
    )


def create(client, resource_type: str, resource_id: str, tags: List[Dict]) -> None:
    _action(client, resource_type, resource_id, ACTION_CREATE, tags)


def delete(client, resource_type: str, resource_id: str, tags: List[Dict]) -> None:
    _action(client, resource_type, resource_id, ACTION_DELETE, tags)
