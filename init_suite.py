"""Retrieve and process acceptance suites."""
import os
from glob import glob
from typing import List

from utility.log import Log
from utility.utils import load_file

log = Log(__name__)

SUPPORTED_PATTERNS = (".yaml", ".yml")


def merge_dicts(dict1, dict2):
    """
    Returns dict1 by recursively merging dict2 into dict1

    Args:
        dict1 (dict):     The dictionary of a test in <test_suite>.
        dict2 (dict):     The dictionary of the same test in <overrides>.

    Returns:
        Dict -> dictionary after merging overrides dict into test_suite dict
    """
    if isinstance(dict1, list) and isinstance(dict2, list):
        dict1.extend(dict2)
        return dict1
    if not isinstance(dict1, dict) or not isinstance(dict2, dict):
        return dict2
    for k in dict2:
        if k in dict1:
            dict1[k] = merge_dicts(dict1[k], dict2[k])
        else:
            dict1[k] = dict2[k]
    return dict1


def process_override(dir_name: str) -> List:
    """
    Returns the tests of the suite found in dir_name with its overrides applied.

    The directory holds the suite (or a link to it) and an optional
    overrides.yaml::

        tests:
          - test:
              index: 2      # test of the suite to update, starts at 1
              config:
                scenario: variables

    Args:
        dir_name (str):     The directory to be processed.

    Returns:
        List -> Tests after processing the override section.
    """
    override_data = dict()
    test_data = dict()

    log.debug(f"Processing overrides of {dir_name}")

    for file in glob(os.path.join(dir_name, "*")):
        if file.endswith("overrides.yaml"):
            override_data = load_file(file)
            continue

        test_data = load_file(file)

    for test in override_data.get("tests", list()):
        index = test["test"].pop("index", 1) - 1
        merge_dicts(test_data["tests"][index]["test"], test["test"])

    return test_data.get("tests", list())


def collate(suite_files):
    """
    Collate the tests of the given suite files and override directories.

    Returns:
        dict:
            suite = {
                "tests": <list of tests from the yamls>,
                "nan": <list of unsupported and not found file(s) or directory(s)>
            }
    """
    suites = dict({"tests": list(), "nan": list()})

    for suite in suite_files:
        if os.path.isfile(suite) and suite.endswith(SUPPORTED_PATTERNS):
            suites["tests"].extend(load_file(suite).get("tests") or [])
            continue

        if not os.path.isdir(suite):
            log.debug(f"Not a supported file: {suite}")
            suites["nan"].append(suite)
            continue

        suites["tests"].extend(process_override(suite))

    return suites


def load_suites(test_suites):
    """high level wrapper to process list of test_suites

    Args:
        test_suites [list]: suite files (yaml) or directories holding a suite
                            and its overrides

    Returns:
        dict: suite of tests and nan
    """
    log.info(f"List of test suites provided: \n{test_suites}")
    return collate(test_suites)
