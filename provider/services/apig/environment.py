"""``huaweicloud_apig_environment`` resource."""

from provider.common import check_deleted
from provider.exceptions import ProviderError
from provider.schema import Resource, Schema, ValueType, import_composite_id
from provider.services.apig.common import description_schema, name_schema
from sdk.apig import environments
from sdk.exceptions import SDKError

STRING = ValueType.STRING


def resource_apig_environment():
    return Resource(
        create=create,
        read=read,
        update=update,
        delete=delete,
        importer=import_composite_id("instance_id"),
        schema={
            "region": Schema(STRING, optional=True, computed=True, force_new=True),
            "instance_id": Schema(STRING, required=True, force_new=True),
            "name": name_schema(),
            "description": description_schema(),
            "created_at": Schema(STRING, computed=True),
        },
    )


def create(d, cfg):
    client = cfg.apig_v2_client(cfg.get_region(d))

    try:
        env = environments.create(
            client, d.get("instance_id"), d.get("name"), d.get("description")
        )
    except SDKError as e:
        raise ProviderError(f"error creating APIG environment: {e}") from e

    d.set_id(env.id)
    read(d, cfg)


def read(d, cfg):
    region = cfg.get_region(d)
    client = cfg.apig_v2_client(region)

    try:
        env = environments.get(client, d.get("instance_id"), d.id)
    except SDKError as e:
        check_deleted(d, e, "APIG environment")
        return

    d.set_many(
        {
            "region": region,
            "name": env.name,
            "description": env.description,
            "created_at": env.created_at,
        }
    ).raise_if_any("error saving APIG environment fields")


def update(d, cfg):
    client = cfg.apig_v2_client(cfg.get_region(d))

    try:
        environments.update(
            client, d.get("instance_id"), d.id, d.get("name"), d.get("description")
        )
    except SDKError as e:
        raise ProviderError(f"error updating APIG environment ({d.id}): {e}") from e

    read(d, cfg)


def delete(d, cfg):
    client = cfg.apig_v2_client(cfg.get_region(d))

    try:
        environments.delete(client, d.get("instance_id"), d.id)
    except SDKError as e:
        check_deleted(d, e, "error deleting APIG environment")
        return

    d.set_id("")
