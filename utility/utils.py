import os
import random
from string import ascii_uppercase, digits

import yaml

RUN_DIR_PREFIX = "hwcloud-run"


def load_file(file_name):
    """Return the content of a yaml file, an empty dict when it is empty."""
    with open(os.path.abspath(file_name), "r") as conf_:
        content = yaml.safe_load(conf_)

    return content or {}


def create_run_dir(run_id, log_dir=""):
    """
    Create the directory holding the logs and results of a run.

    Args:
        run_id: id of the run, names the default directory
        log_dir: directory to use instead, relative to the working directory

    Returns:
        absolute path of the directory
    """
    if log_dir:
        run_dir = os.path.abspath(log_dir)
    else:
        run_dir = os.path.join("/tmp", f"{RUN_DIR_PREFIX}-{run_id}")

    print(f"log directory - {run_dir}")
    os.makedirs(run_dir, exist_ok=True)
    return run_dir


def create_unique_test_name(test_name, name_list):
    """
    Return ``<test name>_<n>`` with the lowest n not already in name_list.

    Whitespace in the test name is replaced by underscores so the name can be
    used for log files.
    """
    base = "_".join(str(test_name).split())
    num = 0
    while f"{base}_{num}" in name_list:
        num += 1
    return f"{base}_{num}"


def generate_unique_id(length):
    """Return a random string of upper case letters and digits."""
    return "".join(random.choices(ascii_uppercase + digits, k=length))


def get_run_status(results_list):
    """Return 1 when any of the executed tests failed, else 0."""
    return 1 if any(tc.get("status") == "Failed" for tc in results_list) else 0
