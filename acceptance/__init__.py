"""Acceptance test support: environment settings, naming and pre-checks.

Acceptance tests create real cloud resources. They read the prerequisites
that the provider does not manage (network, APIG instance...) from the
``HW_*`` environment variables.
"""

import os
import random
import string

from acceptance.exceptions import PreCheckError
from utility.log import Log

LOG = Log(__name__)

ENV_VARIABLES = (
    "HW_REGION_NAME",
    "HW_ACCESS_KEY",
    "HW_SECRET_KEY",
    "HW_PROJECT_ID",
    "HW_VPC_ID",
    "HW_NETWORK_ID",
    "HW_SECGROUP_ID",
    "HW_AVAILABILITY_ZONE",
    "HW_APIG_INSTANCE_ID",
    "HW_DDS_INSTANCE_NAME",
)

RESOURCE_PREFIX = "tf_test_"


def env(name):
    """Return the value of an acceptance environment variable, "" when unset."""
    return os.environ.get(name, "")


def random_acc_resource_name(length=6):
    """Return a unique name, e.g. tf_test_k2x9zq."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=length))
    return f"{RESOURCE_PREFIX}{suffix}"


def pre_check(*variables, environ=None):
    """
    Ensure the credentials and the given variables are set in the environment.

    Args:
        variables: names of additional HW_* variables the test needs
        environ (dict): environment to check, os.environ by default

    Raises:
        PreCheckError   listing the missing variables
    """
    environ = os.environ if environ is None else environ
    required = ("HW_REGION_NAME",) + variables
    missing = [v for v in required if not environ.get(v)]

    if not environ.get("HW_AUTH_TOKEN") and not (
        environ.get("HW_ACCESS_KEY") and environ.get("HW_SECRET_KEY")
    ):
        missing.append("HW_ACCESS_KEY/HW_SECRET_KEY or HW_AUTH_TOKEN")

    if missing:
        LOG.warning(f"Skipping, missing environment: {missing}")
        raise PreCheckError(
            f"{', '.join(missing)} must be set for acceptance tests"
        )
