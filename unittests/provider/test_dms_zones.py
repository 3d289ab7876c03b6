import mock
import pytest

from provider.exceptions import ProviderError
from provider.services.dms.common import (
    get_available_zone_code_by_id,
    get_available_zone_id_by_code,
)
from sdk.dms.availablezones import AvailableZone
from sdk.exceptions import InternalServerError

ZONES = [
    AvailableZone(id="d573142f24894ef3bd3664de068b44b0", code="cn-north-4a"),
    AvailableZone(id="9f1c5806706d4c1fb0eb72f0a9b18c77", code="cn-north-4b"),
]


@pytest.fixture
def zones():
    with mock.patch(
        "provider.services.dms.common.availablezones.get", return_value=ZONES
    ) as _get:
        yield _get


def test_zone_ids_by_code(cfg, zones):
    ids = get_available_zone_id_by_code(cfg, "cn-north-4", ["cn-north-4b", "cn-north-4a"])

    assert ids == ["9f1c5806706d4c1fb0eb72f0a9b18c77", "d573142f24894ef3bd3664de068b44b0"]
    cfg.dms_v2_client.assert_called_once_with("cn-north-4")


def test_zone_codes_by_id(cfg, zones):
    codes = get_available_zone_code_by_id(
        cfg, "cn-north-4", ["d573142f24894ef3bd3664de068b44b0"]
    )

    assert codes == ["cn-north-4a"]


def test_empty_lists_skip_the_query(cfg, zones):
    assert get_available_zone_id_by_code(cfg, "cn-north-4", []) == []
    assert get_available_zone_code_by_id(cfg, "cn-north-4", None) == []
    zones.assert_not_called()


def test_unknown_zone_code(cfg, zones):
    with pytest.raises(ProviderError) as e:
        get_available_zone_id_by_code(cfg, "cn-north-4", ["cn-north-4z"])
    assert "unable to find the availability zone cn-north-4z" in str(e.value)


def test_unknown_zone_id(cfg, zones):
    with pytest.raises(ProviderError):
        get_available_zone_code_by_id(cfg, "cn-north-4", ["missing"])


def test_zone_query_error(cfg):
    error = InternalServerError(500, "GET", "https://dms/v2/available-zones")
    with mock.patch(
        "provider.services.dms.common.availablezones.get", side_effect=error
    ):
        with pytest.raises(ProviderError) as e:
            get_available_zone_id_by_code(cfg, "cn-north-4", ["cn-north-4a"])

    assert "error querying DMS availability zones" in str(e.value)
