"""``huaweicloud_images_images`` data source, backed by the v2 image API."""

from provider.exceptions import ProviderError
from provider.schema import Resource, Schema, ValueType
from provider.utils import hashcode_strings
from provider.validation import string_in_slice
from sdk.exceptions import SDKError
from sdk.images import operations
from utility.log import Log

LOG = Log(__name__)

STRING = ValueType.STRING


def data_source_images_images():
    computed_string = Schema(STRING, computed=True)
    return Resource(
        read=read,
        schema={
            "region": Schema(STRING, optional=True, computed=True),
            "name": Schema(STRING, optional=True),
            "visibility": Schema(
                STRING,
                optional=True,
                validate=string_in_slice(["public", "private", "community", "shared"]),
            ),
            "owner": Schema(STRING, optional=True),
            "tag": Schema(STRING, optional=True),
            "status": Schema(STRING, optional=True),
            "sort_key": Schema(STRING, optional=True, default="name"),
            "sort_direction": Schema(
                STRING, optional=True, default="asc", validate=string_in_slice(["asc", "desc"])
            ),
            "images": Schema(
                ValueType.LIST,
                computed=True,
                elem=Resource(
                    schema={
                        "id": computed_string,
                        "name": computed_string,
                        "status": computed_string,
                        "visibility": computed_string,
                        "owner": computed_string,
                        "container_format": computed_string,
                        "disk_format": computed_string,
                        "min_disk_gb": Schema(ValueType.INT, computed=True),
                        "min_ram_mb": Schema(ValueType.INT, computed=True),
                        "size_bytes": Schema(ValueType.INT, computed=True),
                        "checksum": computed_string,
                        "protected": Schema(ValueType.BOOL, computed=True),
                        "tags": Schema(ValueType.LIST, computed=True, elem=Schema(STRING)),
                        "created_at": computed_string,
                        "updated_at": computed_string,
                    }
                ),
            ),
        },
    )


def _flatten_image(image):
    return {
        "id": image.id,
        "name": image.name,
        "status": image.status,
        "visibility": image.visibility,
        "owner": image.owner,
        "container_format": image.container_format,
        "disk_format": image.disk_format,
        "min_disk_gb": image.min_disk,
        "min_ram_mb": image.min_ram,
        "size_bytes": image.size,
        "checksum": image.checksum,
        "protected": image.protected,
        "tags": image.tags,
        "created_at": image.created_at,
        "updated_at": image.updated_at,
    }


def read(d, cfg):
    region = cfg.get_region(d)
    client = cfg.ims_v2_client(region)

    opts = operations.ListOpts(
        name=d.get("name"),
        visibility=d.get("visibility"),
        owner=d.get("owner"),
        tag=d.get("tag"),
        status=d.get("status"),
        sort_key=d.get("sort_key"),
        sort_dir=d.get("sort_direction"),
    )
    try:
        images = list(operations.list_images(client, opts))
    except SDKError as e:
        raise ProviderError(f"error retrieving images: {e}") from e

    LOG.debug(f"Found {len(images)} images matching {opts.to_query()}")
    d.set_id(hashcode_strings([i.id for i in images]))
    d.set_many(
        {"region": region, "images": [_flatten_image(i) for i in images]}
    ).raise_if_any("error saving images")
