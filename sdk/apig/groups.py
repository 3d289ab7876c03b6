"""API group operations."""

from dataclasses import dataclass
from typing import Dict

from sdk.apig import urls


@dataclass
class Group:
    id: str
    name: str = ""
    description: str = ""
    status: int = 0
    subdomain: str = ""
    registration_time: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict) -> "Group":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("remark") or "",
            status=data.get("status", 0),
            subdomain=data.get("sl_domain", ""),
            registration_time=data.get("register_time", ""),
            updated_at=data.get("update_time", ""),
        )


def create(client, instance_id: str, name: str, description: str = "") -> Group:
    body = {"name": name, "remark": description}
    return Group.from_dict(
        client.post(urls.groups_url(client, instance_id), json_body=body, ok_codes=(201,))
    )


def get(client, instance_id: str, group_id: str) -> Group:
    return Group.from_dict(client.get(urls.group_url(client, instance_id, group_id)))


def update(client, instance_id: str, group_id: str, name: str, description: str = "") -> Group:
    body = {"name": name, "remark": description}
    return Group.from_dict(
        client.put(
            urls.group_url(client, instance_id, group_id), json_body=body, ok_codes=(200,)
        )
    )


def delete(client, instance_id: str, group_id: str) -> None:
    client.delete(urls.group_url(client, instance_id, group_id), ok_codes=(204,))
