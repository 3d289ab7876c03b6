"""
Acceptance tests of the huaweicloud_dds_instances data source.

The data source is queried for the existing instance named HW_DDS_INSTANCE_NAME.

Sample test script

    - test:
        name: DDS instances data source
        desc: Query a DDS instance by name
        module: dds_instances.py
        config:
          mode: Sharding
"""

from jinja2 import Template

from acceptance import env, pre_check
from acceptance.checks import (
    DataSourceCheck,
    check_resource_attr,
    check_resource_attr_set,
    compose,
)
from acceptance.harness import TestCase, TestStep, execute

DATA_SOURCE_NAME = "data.huaweicloud_dds_instances.test"

DATA_SOURCE = Template(
    """
data "huaweicloud_dds_instances" "test" {
  name = "{{ name }}"
{%- if mode %}
  mode = "{{ mode }}"
{%- endif %}
}
"""
)


def basic_case(config):
    name = env("HW_DDS_INSTANCE_NAME")
    dc = DataSourceCheck(DATA_SOURCE_NAME)
    checks = [
        dc.check_resource_exists(),
        check_resource_attr(DATA_SOURCE_NAME, "instances.#", "1"),
        check_resource_attr(DATA_SOURCE_NAME, "instances.0.name", name),
        check_resource_attr_set(DATA_SOURCE_NAME, "instances.0.id"),
    ]
    if config.get("mode"):
        checks.append(
            check_resource_attr(DATA_SOURCE_NAME, "instances.0.mode", config["mode"])
        )

    return TestCase(
        pre_check=lambda: pre_check("HW_DDS_INSTANCE_NAME"),
        steps=[
            TestStep(
                config=DATA_SOURCE.render(name=name, mode=config.get("mode")),
                check=compose(*checks),
            )
        ],
    )


def run(provider, config, **kw):
    return execute(basic_case(config), provider)
