"""``huaweicloud_dds_instances`` data source."""

from provider.exceptions import MultiError, ProviderError
from provider.schema import Resource, Schema, ValueType
from provider.utils import hashcode_strings, tags_to_map
from sdk.common import tags
from sdk.dds import instances
from sdk.exceptions import SDKError
from utility.log import Log

LOG = Log(__name__)

STRING = ValueType.STRING


def _computed(value_type, **kw):
    return Schema(value_type, computed=True, **kw)


def data_source_dds_instances():
    return Resource(
        read=read,
        schema={
            "region": Schema(STRING, optional=True, computed=True),
            "name": Schema(STRING, optional=True),
            "mode": Schema(STRING, optional=True),
            "vpc_id": Schema(STRING, optional=True),
            "subnet_id": Schema(STRING, optional=True),
            "instances": _computed(
                ValueType.LIST,
                elem=Resource(
                    schema={
                        "id": _computed(STRING),
                        "name": _computed(STRING),
                        "mode": _computed(STRING),
                        "status": _computed(STRING),
                        "port": _computed(ValueType.INT),
                        "enterprise_project_id": _computed(STRING),
                        "vpc_id": _computed(STRING),
                        "subnet_id": _computed(STRING),
                        "security_group_id": _computed(STRING),
                        "ssl": _computed(ValueType.BOOL),
                        "db_username": _computed(STRING),
                        "datastore": _computed(
                            ValueType.LIST,
                            elem=Resource(
                                schema={
                                    "type": _computed(STRING),
                                    "version": _computed(STRING),
                                    "storage_engine": _computed(STRING),
                                }
                            ),
                        ),
                        "tags": _computed(ValueType.MAP, elem=Schema(STRING)),
                    }
                ),
            ),
        },
    )


def _flatten_instance(client, instance, m_err):
    instance_tags = {}
    try:
        instance_tags = tags_to_map(tags.get(client, "instances", instance.id))
    except SDKError as e:
        LOG.warning(f"error fetching tags of DDS instance ({instance.id}): {e}")
        m_err.append(ProviderError(f"error fetching tags of DDS instance ({instance.id}): {e}"))

    datastore = []
    if instance.datastore:
        datastore.append(
            {
                "type": instance.datastore.get("type", ""),
                "version": instance.datastore.get("version", ""),
                "storage_engine": instance.datastore.get("storage_engine", ""),
            }
        )

    return {
        "id": instance.id,
        "name": instance.name,
        "mode": instance.mode,
        "status": instance.status,
        "port": instance.port,
        "enterprise_project_id": instance.enterprise_project_id,
        "vpc_id": instance.vpc_id,
        "subnet_id": instance.subnet_id,
        "security_group_id": instance.security_group_id,
        "ssl": instance.ssl,
        "db_username": instance.db_username,
        "datastore": datastore,
        "tags": instance_tags,
    }


def read(d, cfg):
    region = cfg.get_region(d)
    client = cfg.dds_v3_client(region)

    opts = instances.ListOpts(
        name=d.get("name"),
        mode=d.get("mode"),
        vpc_id=d.get("vpc_id"),
        subnet_id=d.get("subnet_id"),
    )
    try:
        found = list(instances.list_instances(client, opts))
    except SDKError as e:
        raise ProviderError(f"unable to list DDS instances: {e}") from e

    LOG.debug(f"Found {len(found)} DDS instances")
    d.set_id(hashcode_strings([i.id for i in found]))
    m_err = MultiError()
    flattened = [_flatten_instance(client, i, m_err) for i in found]
    m_err.append(d.set_many({"region": region, "instances": flattened}))
    m_err.raise_if_any("error saving DDS instances")
