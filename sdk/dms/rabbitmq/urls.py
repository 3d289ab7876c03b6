def create_url(c):
    return c.service_url("instances")


def list_url(c):
    return c.service_url("instances")


def instance_url(c, instance_id):
    return c.service_url("instances", instance_id)


def get_url(c, instance_id):
    return instance_url(c, instance_id)


def update_url(c, instance_id):
    return instance_url(c, instance_id)


def delete_url(c, instance_id):
    return instance_url(c, instance_id)


# `resize_url(c, i)` is the URL for extending the specification of the
# instance `i`.
def resize_url(c, instance_id):
    return c.service_url("instances", instance_id, "extend")
