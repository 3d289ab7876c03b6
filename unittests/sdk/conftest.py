import mock
import pytest

from sdk.client import ServiceClient

ENDPOINT = "https://dms.cn-north-4.myhuaweicloud.com/"


@pytest.fixture
def provider_client():
    provider = mock.Mock()
    provider.project_id = "0970dd7a1300f5672ff2c003c60ae115"
    provider.region = "cn-north-4"
    return provider


@pytest.fixture
def service_client(provider_client):
    """Project scoped client, e.g. DMS, APIG or DDS."""
    return ServiceClient(
        provider_client,
        ENDPOINT,
        resource_base=ENDPOINT + "v2/0970dd7a1300f5672ff2c003c60ae115",
        service_type="dms",
    )
