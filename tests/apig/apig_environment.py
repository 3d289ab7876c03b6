"""
Acceptance tests of the huaweicloud_apig_environment resource.

Sample test script

    - test:
        name: APIG environment basic
        desc: Create, rename and import an APIG environment
        module: apig_environment.py
"""

from jinja2 import Template

from acceptance import env, pre_check, random_acc_resource_name
from acceptance.checks import ResourceCheck, check_resource_attr, compose
from acceptance.harness import TestCase, TestStep, execute
from sdk.apig import environments

RESOURCE_NAME = "huaweicloud_apig_environment.test"

ENVIRONMENT = Template(
    """
resource "huaweicloud_apig_environment" "test" {
  name        = "{{ name }}"
  instance_id = "{{ instance_id }}"
  description = "{{ description }}"
}
"""
)


def get_environment(cfg, rs):
    client = cfg.apig_v2_client(env("HW_REGION_NAME") or None)
    return environments.get(client, rs.attributes["instance_id"], rs.id)


def basic_case(cfg):
    name = random_acc_resource_name()
    update_name = random_acc_resource_name()
    instance_id = env("HW_APIG_INSTANCE_ID")
    rc = ResourceCheck(RESOURCE_NAME, get_environment, cfg)

    return TestCase(
        pre_check=lambda: pre_check("HW_APIG_INSTANCE_ID"),
        check_destroy=rc.check_resource_destroy(),
        steps=[
            TestStep(
                config=ENVIRONMENT.render(
                    name=name, instance_id=instance_id, description="Created by script"
                ),
                check=compose(
                    rc.check_resource_exists(),
                    check_resource_attr(RESOURCE_NAME, "name", name),
                    check_resource_attr(RESOURCE_NAME, "description", "Created by script"),
                ),
            ),
            TestStep(
                config=ENVIRONMENT.render(
                    name=update_name, instance_id=instance_id, description="Updated by script"
                ),
                check=compose(
                    rc.check_resource_exists(),
                    check_resource_attr(RESOURCE_NAME, "name", update_name),
                    check_resource_attr(RESOURCE_NAME, "description", "Updated by script"),
                ),
            ),
            TestStep(
                resource_name=RESOURCE_NAME,
                import_state=True,
                import_state_verify=True,
                import_state_id_func=lambda s: f"{instance_id}/{s[RESOURCE_NAME].id}",
            ),
        ],
    )


def run(provider, config, **kw):
    return execute(basic_case(provider.meta), provider)
