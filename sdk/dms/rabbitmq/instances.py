"""RabbitMQ instance operations."""

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

from sdk.dms.rabbitmq import urls
from sdk.pagination import OffsetPager


def _omit_empty(data: Dict, keep=()) -> Dict:
    return {k: v for k, v in data.items() if k in keep or v not in (None, "", [], 0, False)}


@dataclass
class CreateOpts:
    """Request body of the instance creation."""

    name: str
    engine: str
    engine_version: str
    storage_space: int
    access_user: str
    vpc_id: str
    security_group_id: str
    subnet_id: str
    available_zones: List[str]
    product_id: str
    storage_spec_code: str
    description: str = ""
    password: str = ""
    maintain_begin: str = ""
    maintain_end: str = ""
    ssl_enable: bool = False
    enable_publicip: bool = False
    publicip_id: str = ""
    enterprise_project_id: str = ""
    tags: List[Dict] = field(default_factory=list)

    def to_body(self) -> Dict:
        return _omit_empty(asdict(self), keep=("ssl_enable",))


@dataclass
class UpdateOpts:
    """Request body of the instance modification.

    ``description`` is always sent so that it can be cleared; ``enable_publicip``
    is only sent when the public IP binding changes.
    """

    name: str = ""
    description: Optional[str] = None
    maintain_begin: str = ""
    maintain_end: str = ""
    security_group_id: str = ""
    enterprise_project_id: str = ""
    enable_publicip: Optional[bool] = None
    publicip_id: str = ""

    def to_body(self) -> Dict:
        body = _omit_empty(asdict(self))
        if self.description is not None:
            body["description"] = self.description
        if self.enable_publicip is not None:
            body["enable_publicip"] = self.enable_publicip
        return body


@dataclass
class ResizeOpts:
    new_spec_code: str
    new_storage_space: int

    def to_body(self) -> Dict:
        return asdict(self)


@dataclass
class Instance:
    """RabbitMQ instance as returned by the query API."""

    instance_id: str
    name: str = ""
    description: str = ""
    engine: str = ""
    engine_version: str = ""
    specification: str = ""
    storage_space: int = 0
    total_storage_space: int = 0
    used_storage_space: int = 0
    connect_address: str = ""
    management_connect_address: str = ""
    port: int = 0
    status: str = ""
    resource_spec_code: str = ""
    type: str = ""
    vpc_id: str = ""
    security_group_id: str = ""
    subnet_id: str = ""
    available_zones: List[str] = field(default_factory=list)
    product_id: str = ""
    maintain_begin: str = ""
    maintain_end: str = ""
    enable_publicip: bool = False
    publicip_id: str = ""
    ssl_enable: bool = False
    storage_spec_code: str = ""
    enterprise_project_id: str = ""
    user_id: str = ""
    user_name: str = ""
    access_user: str = ""

    @classmethod
    def from_dict(cls, data: Dict) -> "Instance":
        known = {
            k: v
            for k, v in data.items()
            if k in cls.__dataclass_fields__ and v is not None
        }
        instance = cls(**known)
        instance.available_zones = list(instance.available_zones or [])
        return instance


def create(client, opts: CreateOpts) -> str:
    """Create an instance and return its ID."""
    body = client.post(urls.create_url(client), json_body=opts.to_body(), ok_codes=(200,))
    return body["instance_id"]


def get(client, instance_id: str) -> Instance:
    return Instance.from_dict(client.get(urls.get_url(client, instance_id)))


def update(client, instance_id: str, opts: UpdateOpts) -> None:
    client.put(
        urls.update_url(client, instance_id), json_body=opts.to_body(), ok_codes=(204,)
    )


def delete(client, instance_id: str) -> None:
    client.delete(urls.delete_url(client, instance_id), ok_codes=(204,))


def resize(client, instance_id: str, opts: ResizeOpts) -> str:
    """Extend the instance specification, returns the job ID."""
    body = client.post(
        urls.resize_url(client, instance_id), json_body=opts.to_body(), ok_codes=(200,)
    )
    return body.get("job_id", "")


def list_instances(client, engine: str, name: Optional[str] = None):
    params = {"engine": engine, "name": name}
    pager = OffsetPager(
        client, urls.list_url(client), "instances", params=params, total_key="instance_num"
    )
    for item in pager:
        yield Instance.from_dict(item)
