"""Availability zones offered by the DMS service in a region."""

from dataclasses import dataclass
from typing import Dict, List


@dataclass
class AvailableZone:
    id: str
    code: str
    name: str = ""
    port: str = ""
    resource_availability: str = ""

    @classmethod
    def from_dict(cls, data: Dict) -> "AvailableZone":
        return cls(
            id=data.get("id", ""),
            code=data.get("code", ""),
            name=data.get("name", ""),
            port=str(data.get("port", "")),
            resource_availability=str(data.get("resource_availability", "")),
        )


# The listing is not project scoped: /v2/available-zones
def get_url(c):
    return c.root_url("v2", "available-zones")


def get(client) -> List[AvailableZone]:
    body = client.get(get_url(client))
    return [AvailableZone.from_dict(z) for z in body.get("available_zones") or []]
