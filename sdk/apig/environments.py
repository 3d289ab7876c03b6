"""Environment and environment variable operations."""

from dataclasses import dataclass
from typing import Dict, Optional

from sdk.apig import urls
from sdk.exceptions import NotFoundError
from sdk.pagination import OffsetPager


@dataclass
class Environment:
    id: str
    name: str = ""
    description: str = ""
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict) -> "Environment":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            description=data.get("remark") or "",
            created_at=data.get("create_time", ""),
        )


@dataclass
class Variable:
    id: str
    group_id: str
    env_id: str
    name: str
    value: str

    @classmethod
    def from_dict(cls, data: Dict) -> "Variable":
        return cls(
            id=data["id"],
            group_id=data.get("group_id", ""),
            env_id=data.get("env_id", ""),
            name=data.get("variable_name", ""),
            value=data.get("variable_value", ""),
        )


def create(client, instance_id: str, name: str, description: str = "") -> Environment:
    body = {"name": name, "remark": description}
    return Environment.from_dict(
        client.post(
            urls.environments_url(client, instance_id), json_body=body, ok_codes=(201,)
        )
    )


def list_environments(client, instance_id: str, name: Optional[str] = None):
    pager = OffsetPager(
        client,
        urls.environments_url(client, instance_id),
        "envs",
        params={"name": name},
        total_key="total",
    )
    for item in pager:
        yield Environment.from_dict(item)


def get(client, instance_id: str, env_id: str) -> Environment:
    """There is no query API for a single environment, the listing is searched.

    Raises:
        NotFoundError   when no environment has the given ID
    """
    for env in list_environments(client, instance_id):
        if env.id == env_id:
            return env

    url = urls.environment_url(client, instance_id, env_id)
    raise NotFoundError(404, "GET", url, body=f"environment {env_id} not found")


def update(client, instance_id: str, env_id: str, name: str, description: str = "") -> Environment:
    body = {"name": name, "remark": description}
    return Environment.from_dict(
        client.put(
            urls.environment_url(client, instance_id, env_id),
            json_body=body,
            ok_codes=(200,),
        )
    )


def delete(client, instance_id: str, env_id: str) -> None:
    client.delete(urls.environment_url(client, instance_id, env_id), ok_codes=(204,))


def create_variable(
    client, instance_id: str, group_id: str, env_id: str, name: str, value: str
) -> Variable:
    body = {
        "group_id": group_id,
        "env_id": env_id,
        "variable_name": name,
        "variable_value": value,
    }
    return Variable.from_dict(
        client.post(urls.variables_url(client, instance_id), json_body=body, ok_codes=(201,))
    )


def list_variables(client, instance_id: str, group_id: str, env_id: Optional[str] = None):
    pager = OffsetPager(
        client,
        urls.variables_url(client, instance_id),
        "variables",
        params={"group_id": group_id, "env_id": env_id},
        total_key="total",
    )
    for item in pager:
        yield Variable.from_dict(item)


def delete_variable(client, instance_id: str, variable_id: str) -> None:
    client.delete(urls.variable_url(client, instance_id, variable_id), ok_codes=(204,))
