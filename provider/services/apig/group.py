"""``huaweicloud_apig_group`` resource.

A group optionally binds environment variables to the environments of its
dedicated instance::

    environment {
      environment_id = huaweicloud_apig_environment.test.id

      variable {
        name  = "TERRAFORM"
        value = "/stage/terraform"
      }
    }
"""

from collections import defaultdict

from provider.common import check_deleted
from provider.exceptions import ProviderError
from provider.schema import Resource, Schema, ValueType, import_composite_id
from provider.services.apig.common import description_schema, name_schema
from sdk.apig import environments, groups
from sdk.exceptions import SDKError
from utility.log import Log

LOG = Log(__name__)

STRING = ValueType.STRING


def resource_apig_group():
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
            "environment": Schema(
                ValueType.SET,
                optional=True,
                elem=Resource(
                    schema={
                        "environment_id": Schema(STRING, required=True),
                        "variable": Schema(
                            ValueType.SET,
                            required=True,
                            elem=Resource(
                                schema={
                                    "name": Schema(STRING, required=True),
                                    "value": Schema(STRING, required=True),
                                }
                            ),
                        ),
                    }
                ),
            ),
            "registration_time": Schema(STRING, computed=True),
            "updated_at": Schema(STRING, computed=True),
        },
    )


def _wanted_variables(d):
    """Return the configured variables as {(environment_id, name): value}."""
    wanted = {}
    for env in d.get("environment"):
        for var in env.get("variable") or []:
            wanted[(env["environment_id"], var["name"])] = var["value"]
    return wanted


def _flatten_variables(variables):
    by_env = defaultdict(list)
    for var in variables:
        by_env[var.env_id].append({"name": var.name, "value": var.value})

    return [
        {"environment_id": env_id, "variable": by_env[env_id]} for env_id in sorted(by_env)
    ]


def sync_variables(client, d, instance_id, group_id):
    """Create, replace and remove variables until they match the config."""
    wanted = _wanted_variables(d)
    current = list(environments.list_variables(client, instance_id, group_id))

    for var in current:
        key = (var.env_id, var.name)
        if wanted.get(key) != var.value:
            LOG.debug(f"Removing variable {var.name} from environment {var.env_id}")
            environments.delete_variable(client, instance_id, var.id)

    existing = {(v.env_id, v.name): v.value for v in current}
    for (env_id, name), value in sorted(wanted.items()):
        if existing.get((env_id, name)) == value:
            continue
        LOG.debug(f"Adding variable {name} to environment {env_id}")
        environments.create_variable(client, instance_id, group_id, env_id, name, value)


def create(d, cfg):
    client = cfg.apig_v2_client(cfg.get_region(d))
    instance_id = d.get("instance_id")

    try:
        group = groups.create(client, instance_id, d.get("name"), d.get("description"))
    except SDKError as e:
        raise ProviderError(f"error creating APIG group: {e}") from e

    d.set_id(group.id)

    if d.get("environment"):
        try:
            sync_variables(client, d, instance_id, group.id)
        except SDKError as e:
            raise ProviderError(
                f"error creating environment variables of APIG group ({group.id}): {e}"
            ) from e

    read(d, cfg)


def read(d, cfg):
    region = cfg.get_region(d)
    client = cfg.apig_v2_client(region)
    instance_id = d.get("instance_id")

    try:
        group = groups.get(client, instance_id, d.id)
    except SDKError as e:
        check_deleted(d, e, "APIG group")
        return

    try:
        variables = list(environments.list_variables(client, instance_id, d.id))
    except SDKError as e:
        raise ProviderError(
            f"error retrieving environment variables of APIG group ({d.id}): {e}"
        ) from e

    m_err = d.set_many(
        {
            "region": region,
            "name": group.name,
            "description": group.description,
            "environment": _flatten_variables(variables),
            "registration_time": group.registration_time,
            "updated_at": group.updated_at,
        }
    )
    m_err.raise_if_any("error saving APIG group fields")


def update(d, cfg):
    client = cfg.apig_v2_client(cfg.get_region(d))
    instance_id = d.get("instance_id")

    if d.has_changes("name", "description"):
        try:
            groups.update(client, instance_id, d.id, d.get("name"), d.get("description"))
        except SDKError as e:
            raise ProviderError(f"error updating APIG group ({d.id}): {e}") from e

    if d.has_change("environment"):
        try:
            sync_variables(client, d, instance_id, d.id)
        except SDKError as e:
            raise ProviderError(
                f"error updating environment variables of APIG group ({d.id}): {e}"
            ) from e

    read(d, cfg)


def delete(d, cfg):
    client = cfg.apig_v2_client(cfg.get_region(d))

    try:
        groups.delete(client, d.get("instance_id"), d.id)
    except SDKError as e:
        check_deleted(d, e, "error deleting APIG group")
        return

    d.set_id("")
