from sdk.pagination import next_page_url


# `list_url` is a pure function. `list_url(c)` is a URL for which a GET
# request will respond with a list of images in the service `c`.
def list_url(c):
    return c.service_url("images")


def create_url(c):
    return c.service_url("images")


# `image_url(c, i)` is the URL for the image identified by ID `i` in
# the service `c`.
def image_url(c, image_id):
    return c.service_url("images", image_id)


# `get_url(c, i)` is a URL for which a GET request will respond with
# information about the image identified by ID `i` in the service `c`.
def get_url(c, image_id):
    return image_url(c, image_id)


def update_url(c, image_id):
    return image_url(c, image_id)


def delete_url(c, image_id):
    return image_url(c, image_id)


def tag_url(c, image_id, tag):
    return c.service_url("images", image_id, "tags", tag)


def next_url(service_url, requested_next):
    """Full URL of the next page of an image listing."""
    return next_page_url(service_url, requested_next)
