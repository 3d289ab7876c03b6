"""``huaweicloud_dms_rabbitmq_instance`` resource."""

from provider.common import check_deleted, tags_schema
from provider.exceptions import MultiError, ProviderError
from provider.mutexkv import MUTEX_KV
from provider.schema import (
    TIMEOUT_CREATE,
    TIMEOUT_DELETE,
    TIMEOUT_UPDATE,
    Resource,
    ResourceTimeout,
    Schema,
    ValueType,
    import_state_passthrough,
)
from provider.services.dms.common import (
    ENGINE_RABBITMQ,
    get_available_zone_code_by_id,
    get_available_zone_id_by_code,
    get_products,
)
from provider.state import StateChangeConf
from provider.utils import (
    expand_resource_tags,
    expand_to_string_list,
    tags_to_map,
    update_resource_tags,
)
from sdk.common import tags
from sdk.dms.rabbitmq import instances
from sdk.exceptions import NotFoundError, SDKError
from utility.log import Log

LOG = Log(__name__)

LOCK_KEY = "DMS"
DEFAULT_ENGINE_VERSION = "3.7.17"

STRING = ValueType.STRING


def resource_dms_rabbitmq_instance():
    return Resource(
        create=create,
        read=read,
        update=update,
        delete=delete,
        importer=import_state_passthrough,
        timeouts=ResourceTimeout(create=50 * 60, update=50 * 60, delete=15 * 60),
        schema={
            "region": Schema(STRING, optional=True, computed=True, force_new=True),
            "name": Schema(STRING, required=True),
            "description": Schema(STRING, optional=True),
            "engine_version": Schema(
                STRING, optional=True, force_new=True, default=DEFAULT_ENGINE_VERSION
            ),
            "storage_space": Schema(
                ValueType.INT, optional=True, force_new=True, computed=True
            ),
            "storage_spec_code": Schema(STRING, required=True, force_new=True),
            "access_user": Schema(STRING, required=True, force_new=True),
            "password": Schema(STRING, required=True, force_new=True, sensitive=True),
            "vpc_id": Schema(STRING, required=True, force_new=True),
            "security_group_id": Schema(STRING, required=True),
            "network_id": Schema(STRING, required=True, force_new=True),
            # the API returns the zones in no particular order
            "availability_zones": Schema(
                ValueType.SET,
                optional=True,
                computed=True,
                force_new=True,
                conflicts_with=["available_zones"],
                elem=Schema(STRING),
            ),
            "product_id": Schema(STRING, required=True),
            "maintain_begin": Schema(STRING, optional=True, computed=True),
            "maintain_end": Schema(STRING, optional=True, computed=True),
            "ssl_enable": Schema(ValueType.BOOL, optional=True, force_new=True),
            "public_ip_id": Schema(STRING, optional=True),
            "enterprise_project_id": Schema(STRING, optional=True, computed=True),
            "tags": tags_schema(),
            "engine": Schema(STRING, computed=True),
            "specification": Schema(STRING, computed=True),
            "enable_public_ip": Schema(ValueType.BOOL, computed=True),
            "used_storage_space": Schema(ValueType.INT, computed=True),
            "port": Schema(ValueType.INT, computed=True),
            "status": Schema(STRING, computed=True),
            "resource_spec_code": Schema(STRING, computed=True),
            "user_id": Schema(STRING, computed=True),
            "user_name": Schema(STRING, computed=True),
            "connect_address": Schema(STRING, computed=True),
            "management_connect_address": Schema(STRING, computed=True),
            "type": Schema(STRING, computed=True),
            "available_zones": Schema(
                ValueType.LIST,
                optional=True,
                computed=True,
                force_new=True,
                elem=Schema(STRING),
                at_least_one_of=["available_zones", "availability_zones"],
                deprecated='available_zones has deprecated, please use "availability_zones" instead.',
            ),
            # misspelled name kept for existing configurations
            "manegement_connect_address": Schema(
                STRING,
                computed=True,
                deprecated='typo in manegement_connect_address, please use "management_connect_address" instead.',
            ),
        },
    )


def get_product_detail(cfg, d):
    """
    Return the catalogue entry of the configured product and engine version.

    Single node products carry their details directly, cluster products nest
    one entry per node count.

    Raises:
        ProviderError   when the catalogue can not be read or has no such product
    """
    try:
        catalogue = get_products(cfg, cfg.get_region(d), ENGINE_RABBITMQ)
    except SDKError as e:
        raise ProviderError(
            f"error querying product detail, please check product_id, error: {e}"
        ) from e

    product_id = d.get("product_id")
    engine_version = d.get("engine_version")

    for product in catalogue.hourly:
        if product.version != engine_version:
            continue
        for value in product.values:
            for detail in value.details:
                if value.name == "single":
                    if detail.product_id == product_id:
                        return detail
                    continue
                for info in detail.product_infos:
                    if info.product_id == product_id:
                        return info

    raise ProviderError(f"can not found product detail base on product_id: {product_id}")


def _storage_of(product, action):
    try:
        return int(product.storage)
    except ValueError:
        raise ProviderError(
            f"failed to {action} RabbitMQ instance, error parsing storage_space "
            f"to int {product.storage!r}"
        )


def instance_state_refresh(client, instance_id):
    """Refresh function reporting ``DELETED`` once the instance is gone."""

    def _refresh():
        try:
            v = instances.get(client, instance_id)
        except NotFoundError:
            return None, "DELETED"
        except SDKError as e:
            raise ProviderError(f"error retrieving RabbitMQ instance ({instance_id}): {e}") from e
        return v, v.status

    return _refresh


def resize_state_refresh(client, instance_id, product_id):
    """Refresh function of a resize.

    The instance reports RUNNING before the new product is applied, such a
    state is folded back into PENDING.
    """

    def _refresh():
        try:
            v = instances.get(client, instance_id)
        except NotFoundError:
            raise ProviderError(
                f"unable to resize RabbitMQ instance which has been deleted: {instance_id}"
            )
        except SDKError as e:
            raise ProviderError(f"error retrieving RabbitMQ instance ({instance_id}): {e}") from e
        if v.status == "RUNNING" and v.product_id != product_id:
            return v, "PENDING"
        return v, v.status

    return _refresh


def create(d, cfg):
    with MUTEX_KV.locked(LOCK_KEY):
        region = cfg.get_region(d)
        client = cfg.dms_v2_client(region)

        zones, ok = d.get_ok("available_zones")
        if ok:
            zones = expand_to_string_list(zones)
        else:
            zones = get_available_zone_id_by_code(
                cfg, region, d.get("availability_zones")
            )

        storage_space = d.get("storage_space")
        if not storage_space:
            storage_space = _storage_of(get_product_detail(cfg, d), "create")

        opts = instances.CreateOpts(
            name=d.get("name"),
            description=d.get("description"),
            engine=ENGINE_RABBITMQ,
            engine_version=d.get("engine_version"),
            storage_space=storage_space,
            access_user=d.get("access_user"),
            vpc_id=d.get("vpc_id"),
            security_group_id=d.get("security_group_id"),
            subnet_id=d.get("network_id"),
            available_zones=zones,
            product_id=d.get("product_id"),
            maintain_begin=d.get("maintain_begin"),
            maintain_end=d.get("maintain_end"),
            ssl_enable=d.get("ssl_enable"),
            storage_spec_code=d.get("storage_spec_code"),
            enterprise_project_id=cfg.get_enterprise_project_id(d),
        )

        public_ip_id, ok = d.get_ok("public_ip_id")
        if ok:
            opts.enable_publicip = True
            opts.publicip_id = public_ip_id

        tag_map = d.get("tags")
        if tag_map:
            opts.tags = expand_resource_tags(tag_map)

        LOG.debug(f"Create DMS RabbitMQ instance options: {opts}")
        # set after logging the options
        opts.password = d.get("password")

        try:
            instance_id = instances.create(client, opts)
        except SDKError as e:
            raise ProviderError(f"error creating DMS RabbitMQ instance: {e}") from e
        LOG.info(f"Creating RabbitMQ instance, ID: {instance_id}")

        conf = StateChangeConf(
            pending=["CREATING"],
            target=["RUNNING"],
            refresh=instance_state_refresh(client, instance_id),
            timeout=d.timeout(TIMEOUT_CREATE),
            delay=300,
            min_timeout=10,
            poll_interval=15,
        )
        try:
            conf.wait_for_state()
        except ProviderError as e:
            raise ProviderError(
                f"error waiting for RabbitMQ instance ({instance_id}) to be ready: {e}"
            ) from e

        d.set_id(instance_id)

    read(d, cfg)


def read(d, cfg):
    region = cfg.get_region(d)
    client = cfg.dms_v2_client(region)

    try:
        v = instances.get(client, d.id)
    except SDKError as e:
        check_deleted(d, e, "DMS RabbitMQ instance")
        return

    LOG.debug(f"DMS RabbitMQ instance {v}")

    m_err = MultiError()
    codes = []
    try:
        codes = get_available_zone_code_by_id(cfg, region, v.available_zones)
    except ProviderError as e:
        m_err.append(e)

    d.set_id(v.instance_id)
    m_err.append(
        d.set_many(
            {
                "region": region,
                "name": v.name,
                "description": v.description,
                "engine": v.engine,
                "engine_version": v.engine_version,
                "specification": v.specification,
                # storage_space is the total storage space at creation
                "storage_space": v.total_storage_space,
                "vpc_id": v.vpc_id,
                "security_group_id": v.security_group_id,
                "network_id": v.subnet_id,
                "available_zones": v.available_zones,
                "availability_zones": codes,
                "product_id": v.product_id,
                "maintain_begin": v.maintain_begin,
                "maintain_end": v.maintain_end,
                "enable_public_ip": v.enable_publicip,
                "public_ip_id": v.publicip_id,
                "ssl_enable": v.ssl_enable,
                "storage_spec_code": v.storage_spec_code,
                "enterprise_project_id": v.enterprise_project_id,
                "used_storage_space": v.used_storage_space,
                "connect_address": v.connect_address,
                "management_connect_address": v.management_connect_address,
                "manegement_connect_address": v.management_connect_address,
                "port": v.port,
                "status": v.status,
                "resource_spec_code": v.resource_spec_code,
                "user_id": v.user_id,
                "user_name": v.user_name,
                "type": v.type,
                "access_user": v.access_user,
            }
        )
    )

    try:
        resource_tags = tags.get(client, ENGINE_RABBITMQ, d.id)
    except SDKError as e:
        LOG.warning(f"error fetching tags of DMS RabbitMQ instance ({d.id}): {e}")
        m_err.append(
            ProviderError(f"error fetching tags of DMS RabbitMQ instance ({d.id}): {e}")
        )
    else:
        m_err.append(d.set_many({"tags": tags_to_map(resource_tags)}))

    m_err.raise_if_any("failed to set attributes for DMS RabbitMQ instance")


def resize(d, cfg):
    """Extend the instance to the configured product and wait for it."""
    client = cfg.dms_v2_client(cfg.get_region(d))

    product = get_product_detail(cfg, d)
    opts = instances.ResizeOpts(
        new_spec_code=product.spec_code,
        new_storage_space=_storage_of(product, "resize"),
    )
    LOG.debug(f"Resize DMS {ENGINE_RABBITMQ} instance options: {opts}")

    try:
        instances.resize(client, d.id, opts)
    except SDKError as e:
        raise ProviderError(f"resize RabbitMQ instance failed: {e}") from e

    conf = StateChangeConf(
        pending=["EXTENDING", "PENDING"],
        target=["RUNNING"],
        refresh=resize_state_refresh(client, d.id, product.product_id),
        timeout=d.timeout(TIMEOUT_UPDATE),
        delay=180,
        poll_interval=15,
    )
    try:
        conf.wait_for_state()
    except ProviderError as e:
        raise ProviderError(
            f"error waiting for RabbitMQ instance ({d.id}) to resize: {e}"
        ) from e


def update(d, cfg):
    with MUTEX_KV.locked(LOCK_KEY):
        client = cfg.dms_v2_client(cfg.get_region(d))
        m_err = MultiError()

        if d.has_changes(
            "name",
            "description",
            "maintain_begin",
            "maintain_end",
            "security_group_id",
            "public_ip_id",
            "enterprise_project_id",
        ):
            opts = instances.UpdateOpts(
                description=d.get("description"),
                maintain_begin=d.get("maintain_begin"),
                maintain_end=d.get("maintain_end"),
                security_group_id=d.get("security_group_id"),
                enterprise_project_id=d.get("enterprise_project_id"),
            )
            if d.has_change("name"):
                opts.name = d.get("name")

            if d.has_change("public_ip_id"):
                public_ip_id, ok = d.get_ok("public_ip_id")
                opts.enable_publicip = ok
                if ok:
                    opts.publicip_id = public_ip_id

            try:
                instances.update(client, d.id, opts)
            except SDKError as e:
                m_err.append(ProviderError(f"error updating DMS RabbitMQ Instance: {e}"))

        if d.has_change("tags"):
            try:
                update_resource_tags(client, d, ENGINE_RABBITMQ, d.id)
            except SDKError as e:
                m_err.append(
                    ProviderError(
                        f"error updating tags of DMS RabbitMQ instance: {d.id}, err: {e}"
                    )
                )

        if d.has_change("product_id"):
            try:
                resize(d, cfg)
            except ProviderError as e:
                m_err.append(e)

        m_err.raise_if_any("error while updating DMS RabbitMQ instances")

    read(d, cfg)


def delete(d, cfg):
    client = cfg.dms_v2_client(cfg.get_region(d))

    try:
        instances.delete(client, d.id)
    except SDKError as e:
        check_deleted(d, e, "failed to delete DMS RabbitMQ instance")
        return

    LOG.debug(f"Waiting for DMS RabbitMQ instance ({d.id}) to be deleted")
    conf = StateChangeConf(
        # the status may turn to ERROR while deleting
        pending=["DELETING", "RUNNING", "ERROR"],
        target=["DELETED"],
        refresh=instance_state_refresh(client, d.id),
        timeout=d.timeout(TIMEOUT_DELETE),
        delay=90,
        min_timeout=5,
        poll_interval=15,
    )
    try:
        conf.wait_for_state()
    except ProviderError as e:
        raise ProviderError(
            f"error waiting for DMS RabbitMQ instance ({d.id}) to be deleted: {e}"
        ) from e

    LOG.debug(f"DMS RabbitMQ instance {d.id} has been deleted")
    d.set_id("")
