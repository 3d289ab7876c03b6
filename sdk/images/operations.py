"""Image CRUD operations of the v2 image API."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sdk.images import urls
from sdk.pagination import LinkPager

JSON_PATCH_CONTENT_TYPE = "application/openstack-images-v2.1-json-patch"


@dataclass
class ListOpts:
    """Query filters of the image listing."""

    name: Optional[str] = None
    visibility: Optional[str] = None
    owner: Optional[str] = None
    status: Optional[str] = None
    tag: Optional[str] = None
    member_status: Optional[str] = None
    sort_key: Optional[str] = None
    sort_dir: Optional[str] = None
    limit: Optional[int] = None
    marker: Optional[str] = None

    def to_query(self) -> Dict:
        return {k: v for k, v in self.__dict__.items() if v not in (None, "")}


@dataclass
class Image:
    id: str
    name: str = ""
    status: str = ""
    visibility: str = ""
    owner: str = ""
    container_format: str = ""
    disk_format: str = ""
    min_disk: int = 0
    min_ram: int = 0
    size: int = 0
    checksum: str = ""
    protected: bool = False
    tags: List[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""
    properties: Dict = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict) -> "Image":
        known = {k: data.get(k) for k in cls.__dataclass_fields__ if k in data}
        extra = {
            k: v
            for k, v in data.items()
            if k not in cls.__dataclass_fields__ and not k.startswith(("self", "file"))
        }
        image = cls(**known)
        image.tags = image.tags or []
        image.size = image.size or 0
        image.min_disk = image.min_disk or 0
        image.min_ram = image.min_ram or 0
        image.properties = extra
        return image


def list_images(client, opts: Optional[ListOpts] = None):
    """Iterate over every image matching the filters, following next links."""
    params = opts.to_query() if opts else None
    pager = LinkPager(
        client, urls.list_url(client), "images", params=params, next_url=urls.next_url
    )
    for item in pager:
        yield Image.from_dict(item)


def create(client, **kw) -> Image:
    """Register a new image.

    Args:
        kw: name, container_format, disk_format, visibility, tags, min_disk,
            min_ram, protected and any additional image property
    """
    body = {k: v for k, v in kw.items() if v is not None}
    return Image.from_dict(
        client.post(urls.create_url(client), json_body=body, ok_codes=(201,))
    )


def get(client, image_id: str) -> Image:
    return Image.from_dict(client.get(urls.get_url(client, image_id)))


def update(client, image_id: str, operations: List[Dict]) -> Image:
    """Apply a JSON patch to the image.

    Args:
        operations: patch documents, e.g. {"op": "replace", "path": "/name", "value": "x"}
    """
    resp = client.patch(
        urls.update_url(client, image_id),
        json_body=operations,
        headers={"Content-Type": JSON_PATCH_CONTENT_TYPE},
        ok_codes=(200,),
    )
    return Image.from_dict(resp)


def replace_op(attribute: str, value) -> Dict:
    return {"op": "replace", "path": f"/{attribute}", "value": value}


def delete(client, image_id: str) -> None:
    client.delete(urls.delete_url(client, image_id), ok_codes=(204,))
