import pytest

from acceptance.exceptions import ConfigParseError
from acceptance.hcl import (
    DATA,
    MANAGED,
    Block,
    dependency_order,
    interpolate,
    parse_config,
    references,
)

CONFIG = """
resource "huaweicloud_apig_environment" "test1" {
  name        = "tf_test_env"
  instance_id = "a8e3bb2b0c6f4a6d9e3b6f8f1c3b4a5d"
}

resource "huaweicloud_apig_group" "test" {
  name        = "tf_test_group"
  instance_id = "a8e3bb2b0c6f4a6d9e3b6f8f1c3b4a5d"

  environment {
    environment_id = huaweicloud_apig_environment.test1.id

    variable {
      name  = "TERRAFORM"
      value = "/stage/terraform"
    }
  }

  depends_on = [huaweicloud_apig_environment.test1]
}

data "huaweicloud_images_images" "test" {
  name       = "Ubuntu 22.04 server 64bit"
  visibility = "public"
}
"""


def block(address, body=None, depends_on=None):
    mode = MANAGED
    parts = address.split(".")
    if parts[0] == DATA:
        mode, parts = DATA, parts[1:]
    return Block(mode, parts[0], parts[1], body or {}, depends_on or [])


def test_parse_config():
    blocks = parse_config(CONFIG)

    assert [b.address for b in blocks] == [
        "huaweicloud_apig_environment.test1",
        "huaweicloud_apig_group.test",
        "data.huaweicloud_images_images.test",
    ]

    env = blocks[0]
    assert env.mode == MANAGED
    assert env.body == {
        "name": "tf_test_env",
        "instance_id": "a8e3bb2b0c6f4a6d9e3b6f8f1c3b4a5d",
    }

    group = blocks[1]
    assert group.depends_on == ["huaweicloud_apig_environment.test1"]
    assert "depends_on" not in group.body
    environment = group.body["environment"][0]
    assert environment["environment_id"] == "${huaweicloud_apig_environment.test1.id}"
    assert environment["variable"][0] == {"name": "TERRAFORM", "value": "/stage/terraform"}

    assert blocks[2].mode == DATA
    assert blocks[2].body["visibility"] == "public"


def test_parse_invalid_config():
    with pytest.raises(ConfigParseError) as e:
        parse_config('resource "huaweicloud_apig_group" "test" {\n  name = \n')
    assert "invalid HCL configuration" in str(e.value)


def test_references():
    known = {"huaweicloud_apig_environment.test1", "data.huaweicloud_images_images.test"}
    body = {
        "environment": [{"environment_id": "${huaweicloud_apig_environment.test1.id}"}],
        "image_id": "${data.huaweicloud_images_images.test.images[0].id}",
        "name": "${var.unknown}-name",
    }

    assert references(body, known) == [
        "huaweicloud_apig_environment.test1",
        "data.huaweicloud_images_images.test",
    ]


def test_dependency_order():
    blocks = [
        block("huaweicloud_apig_group.test", {"env": "${huaweicloud_apig_environment.b.id}"}),
        block("huaweicloud_apig_environment.b", depends_on=["huaweicloud_apig_environment.a"]),
        block("huaweicloud_apig_environment.a"),
    ]

    ordered = [b.address for b in dependency_order(blocks)]

    assert ordered == [
        "huaweicloud_apig_environment.a",
        "huaweicloud_apig_environment.b",
        "huaweicloud_apig_group.test",
    ]


def test_dependency_cycle():
    blocks = [
        block("fake_thing.a", {"parent": "${fake_thing.b.id}"}),
        block("fake_thing.b", {"parent": "${fake_thing.a.id}"}),
    ]

    with pytest.raises(ConfigParseError) as e:
        dependency_order(blocks)
    assert "dependency cycle between fake_thing.a, fake_thing.b" in str(e.value)


def test_depends_on_undeclared():
    with pytest.raises(ConfigParseError) as e:
        dependency_order([block("fake_thing.a", depends_on=["fake_thing.missing"])])
    assert "depends on undeclared fake_thing.missing" in str(e.value)


def test_interpolate():
    states = {
        "huaweicloud_apig_environment.test1": {"id": "env-id", "name": "env"},
        "data.huaweicloud_images_images.test": {"images": [{"id": "img-1"}, {"id": "img-2"}]},
    }
    value = {
        "environment_id": "${huaweicloud_apig_environment.test1.id}",
        "image_id": "${data.huaweicloud_images_images.test.images[1].id}",
        "images": "${data.huaweicloud_images_images.test.images}",
        "description": "env ${huaweicloud_apig_environment.test1.name} in group",
        "size": 3,
    }

    result = interpolate(value, states)

    assert result == {
        "environment_id": "env-id",
        "image_id": "img-2",
        "images": [{"id": "img-1"}, {"id": "img-2"}],
        "description": "env env in group",
        "size": 3,
    }


@pytest.mark.parametrize(
    "expr, message",
    [
        ("${fake_thing.missing.id}", "reference to unknown resource"),
        ("${fake_thing.a.nope}", "no attribute 'nope'"),
        ("${fake_thing.a.zones[3]}", "no attribute '3'"),
    ],
)
def test_interpolate_errors(expr, message):
    states = {"fake_thing.a": {"id": "a-id", "zones": ["x"]}}

    with pytest.raises(ConfigParseError) as e:
        interpolate(expr, states)
    assert message in str(e.value)
