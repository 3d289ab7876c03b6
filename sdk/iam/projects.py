"""IAM project queries, used to resolve the project ID of a region."""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class Project:
    id: str
    name: str
    domain_id: str = ""
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: Dict) -> "Project":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            domain_id=data.get("domain_id", ""),
            enabled=data.get("enabled", True),
        )


def list_url(c):
    return c.root_url("v3", "projects")


def list_projects(client, name: Optional[str] = None) -> List[Project]:
    body = client.get(list_url(client), params={"name": name})
    return [Project.from_dict(p) for p in body.get("projects") or []]
