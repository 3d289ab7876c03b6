def instance_base(c, instance_id):
    return c.service_url("apigw", "instances", instance_id)


def groups_url(c, instance_id):
    return c.service_url("apigw", "instances", instance_id, "api-groups")


def group_url(c, instance_id, group_id):
    return c.service_url("apigw", "instances", instance_id, "api-groups", group_id)


def environments_url(c, instance_id):
    return c.service_url("apigw", "instances", instance_id, "envs")


def environment_url(c, instance_id, env_id):
    return c.service_url("apigw", "instances", instance_id, "envs", env_id)


def variables_url(c, instance_id):
    return c.service_url("apigw", "instances", instance_id, "env-variables")


def variable_url(c, instance_id, variable_id):
    return c.service_url("apigw", "instances", instance_id, "env-variables", variable_id)
