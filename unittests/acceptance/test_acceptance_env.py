import re

import pytest

from acceptance import RESOURCE_PREFIX, env, pre_check, random_acc_resource_name
from acceptance.exceptions import PreCheckError

CREDENTIALS = {
    "HW_REGION_NAME": "cn-north-4",
    "HW_ACCESS_KEY": "AK",
    "HW_SECRET_KEY": "SK",
}


def test_random_acc_resource_name():
    name = random_acc_resource_name()

    assert re.fullmatch(rf"{RESOURCE_PREFIX}[a-z0-9]{{6}}", name)
    assert name != random_acc_resource_name()


def test_env(monkeypatch):
    monkeypatch.setenv("HW_APIG_INSTANCE_ID", "apig-id")
    monkeypatch.delenv("HW_DDS_INSTANCE_NAME", raising=False)

    assert env("HW_APIG_INSTANCE_ID") == "apig-id"
    assert env("HW_DDS_INSTANCE_NAME") == ""


def test_pre_check_passes():
    pre_check("HW_APIG_INSTANCE_ID", environ=dict(CREDENTIALS, HW_APIG_INSTANCE_ID="x"))
    pre_check(environ={"HW_REGION_NAME": "cn-north-4", "HW_AUTH_TOKEN": "token"})


def test_pre_check_missing_variable():
    with pytest.raises(PreCheckError) as e:
        pre_check("HW_APIG_INSTANCE_ID", environ=CREDENTIALS)
    assert str(e.value) == "HW_APIG_INSTANCE_ID must be set for acceptance tests"


def test_pre_check_missing_credentials():
    with pytest.raises(PreCheckError) as e:
        pre_check(environ={"HW_ACCESS_KEY": "AK"})
    assert "HW_REGION_NAME" in str(e.value)
    assert "HW_ACCESS_KEY/HW_SECRET_KEY or HW_AUTH_TOKEN" in str(e.value)
