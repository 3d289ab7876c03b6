"""Catalogue and availability zone lookups shared by the DMS engines."""

from typing import List

from provider.exceptions import ProviderError
from sdk.dms import availablezones, products
from sdk.exceptions import SDKError

ENGINE_RABBITMQ = "rabbitmq"


def get_products(cfg, region, engine):
    client = cfg.dms_v2_client(region)
    return products.get(client, engine)


def _available_zones(cfg, region):
    client = cfg.dms_v2_client(region)
    try:
        return availablezones.get(client)
    except SDKError as e:
        raise ProviderError(f"error querying DMS availability zones: {e}") from e


def get_available_zone_id_by_code(cfg, region, codes) -> List[str]:
    """
    Convert availability zone codes (e.g. cn-north-4a) into the zone IDs
    expected by the DMS API.

    Raises:
        ProviderError   when a code is not offered in the region
    """
    if not codes:
        return []

    by_code = {az.code: az.id for az in _available_zones(cfg, region)}
    ids = []
    for code in codes:
        if code not in by_code:
            raise ProviderError(
                f"unable to find the availability zone {code} in region {region}"
            )
        ids.append(by_code[code])
    return ids


def get_available_zone_code_by_id(cfg, region, ids) -> List[str]:
    """
    Convert the zone IDs returned by the DMS API into availability zone codes.

    Raises:
        ProviderError   when an ID is not offered in the region
    """
    if not ids:
        return []

    by_id = {az.id: az.code for az in _available_zones(cfg, region)}
    codes = []
    for az_id in ids:
        if az_id not in by_id:
            raise ProviderError(
                f"unable to find the availability zone ID {az_id} in region {region}"
            )
        codes.append(by_id[az_id])
    return codes
