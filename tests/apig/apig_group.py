"""
Acceptance tests of the huaweicloud_apig_group resource.

The groups are created in the dedicated instance given by HW_APIG_INSTANCE_ID.

Sample test script

    - test:
        name: APIG group variables
        desc: Bind environment variables to an APIG group and import it
        module: apig_group.py
        config:
          scenario: variables
"""

from jinja2 import Template

from acceptance import env, pre_check, random_acc_resource_name
from acceptance.checks import ResourceCheck, check_resource_attr, compose
from acceptance.exceptions import AcceptanceError
from acceptance.harness import TestCase, TestStep, execute
from sdk.apig import groups
from utility.log import Log

LOG = Log(__name__)

RESOURCE_NAME = "huaweicloud_apig_group.test"

ENVIRONMENTS = Template(
    """
{%- for i in [1, 2] %}
resource "huaweicloud_apig_environment" "test{{ i }}" {
  name        = "{{ name }}_{{ i }}"
  instance_id = "{{ instance_id }}"
  description = "Created by script"
}
{% endfor %}
"""
)

GROUP = Template(
    """
{{ base }}

resource "huaweicloud_apig_group" "test" {
  name        = "{{ name }}"
  instance_id = "{{ instance_id }}"
{%- if description %}
  description = "{{ description }}"
{%- endif %}
{%- for environment in environments %}

  environment {
    environment_id = huaweicloud_apig_environment.{{ environment.resource }}.id
{%- for variable in environment.variables %}

    variable {
      name  = "{{ variable[0] }}"
      value = "{{ variable[1] }}"
    }
{%- endfor %}
  }
{%- endfor %}
}
"""
)


def get_group(cfg, rs):
    client = cfg.apig_v2_client(env("HW_REGION_NAME") or None)
    return groups.get(client, rs.attributes["instance_id"], rs.id)


def import_state_id(state):
    rs = state.get(RESOURCE_NAME)
    instance_id = rs.attributes.get("instance_id", "") if rs else ""
    if not instance_id or not rs.id:
        raise AcceptanceError(
            f"missing some attributes, want '{{instance_id}}/{{id}}', "
            f"but '{instance_id}/{rs.id if rs else ''}'"
        )
    return f"{instance_id}/{rs.id}"


def group_config(name, description="", environments=(), base=""):
    return GROUP.render(
        base=base,
        name=name,
        instance_id=env("HW_APIG_INSTANCE_ID"),
        description=description,
        environments=environments,
    )


def import_step():
    return TestStep(
        resource_name=RESOURCE_NAME,
        import_state=True,
        import_state_verify=True,
        import_state_id_func=import_state_id,
    )


def basic_case(cfg):
    name = random_acc_resource_name()
    update_name = random_acc_resource_name()
    rc = ResourceCheck(RESOURCE_NAME, get_group, cfg)

    return TestCase(
        pre_check=lambda: pre_check("HW_APIG_INSTANCE_ID"),
        check_destroy=rc.check_resource_destroy(),
        steps=[
            TestStep(
                config=group_config(name, description="Created by script"),
                check=compose(
                    rc.check_resource_exists(),
                    check_resource_attr(RESOURCE_NAME, "name", name),
                    check_resource_attr(RESOURCE_NAME, "description", "Created by script"),
                ),
            ),
            TestStep(
                config=group_config(update_name),
                check=compose(
                    rc.check_resource_exists(),
                    check_resource_attr(RESOURCE_NAME, "name", update_name),
                    check_resource_attr(RESOURCE_NAME, "description", ""),
                ),
            ),
            import_step(),
        ],
    )


def variables_case(cfg):
    name = random_acc_resource_name()
    rc = ResourceCheck(RESOURCE_NAME, get_group, cfg)
    base = ENVIRONMENTS.render(name=name, instance_id=env("HW_APIG_INSTANCE_ID"))

    # each environment has a variable of the same name and a different value
    variables = [
        {"resource": "test1", "variables": [("TERRAFORM", "/stage/terraform")]},
        {
            "resource": "test2",
            "variables": [("TERRAFORM", "/res/terraform"), ("DEMO", "/stage/demo")],
        },
    ]
    variables_update = [
        {
            "resource": "test1",
            "variables": [("TERRAFORM", "/stage/terraform"), ("TEST", "/stage/test")],
        },
        {"resource": "test2", "variables": [("TERRAFORM", "/stage/terraform")]},
    ]

    return TestCase(
        pre_check=lambda: pre_check("HW_APIG_INSTANCE_ID"),
        check_destroy=rc.check_resource_destroy(),
        steps=[
            TestStep(
                config=group_config(name, description="Created by script"),
                check=compose(
                    rc.check_resource_exists(),
                    check_resource_attr(RESOURCE_NAME, "name", name),
                ),
            ),
            TestStep(
                config=group_config(
                    name, "Created by script", environments=variables, base=base
                ),
                check=compose(
                    rc.check_resource_exists(),
                    check_resource_attr(RESOURCE_NAME, "name", name),
                    check_resource_attr(RESOURCE_NAME, "environment.#", "2"),
                ),
            ),
            TestStep(
                config=group_config(
                    name, "Created by script", environments=variables_update, base=base
                ),
                check=compose(
                    rc.check_resource_exists(),
                    check_resource_attr(RESOURCE_NAME, "name", name),
                    check_resource_attr(RESOURCE_NAME, "environment.#", "2"),
                ),
            ),
            import_step(),
        ],
    )


SCENARIOS = {"basic": basic_case, "variables": variables_case}


def run(provider, config, **kw):
    """
    Run one scenario of the APIG group acceptance tests.

    Args:
        provider (Provider): provider under test
        config (dict): test configuration, ``scenario`` is basic or variables
        kw: run configuration passed by the runner

    Returns:
        0 on success, 1 on failure, -1 when skipped
    """
    scenario = config.get("scenario", "basic")
    LOG.info(f"Running APIG group scenario {scenario}")
    return execute(SCENARIOS[scenario](provider.meta), provider)
