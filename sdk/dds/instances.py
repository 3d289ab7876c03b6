"""DDS instance queries."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sdk.pagination import OffsetPager


@dataclass
class ListOpts:
    id: Optional[str] = None
    name: Optional[str] = None
    mode: Optional[str] = None
    datastore_type: Optional[str] = None
    vpc_id: Optional[str] = None
    subnet_id: Optional[str] = None

    def to_query(self) -> Dict:
        return {k: v for k, v in self.__dict__.items() if v not in (None, "")}


@dataclass
class Instance:
    id: str
    name: str = ""
    status: str = ""
    port: int = 0
    mode: str = ""
    region: str = ""
    vpc_id: str = ""
    subnet_id: str = ""
    security_group_id: str = ""
    enterprise_project_id: str = ""
    db_username: str = ""
    ssl: bool = False
    time_zone: str = ""
    datastore: Dict = field(default_factory=dict)
    backup_strategy: Dict = field(default_factory=dict)
    groups: List[Dict] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict) -> "Instance":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            status=data.get("status", ""),
            port=int(data.get("port") or 0),
            mode=data.get("mode", ""),
            region=data.get("region", ""),
            vpc_id=data.get("vpc_id", ""),
            subnet_id=data.get("subnet_id", ""),
            security_group_id=data.get("security_group_id", ""),
            enterprise_project_id=data.get("enterprise_project_id", ""),
            db_username=data.get("db_user_name", ""),
            ssl=str(data.get("ssl", "0")) == "1",
            time_zone=data.get("time_zone", ""),
            datastore=data.get("datastore") or {},
            backup_strategy=data.get("backup_strategy") or {},
            groups=data.get("groups") or [],
        )


def list_url(c):
    return c.service_url("instances")


def list_instances(client, opts: Optional[ListOpts] = None):
    params = opts.to_query() if opts else {}
    for item in OffsetPager(client, list_url(client), "instances", params=params):
        yield Instance.from_dict(item)
