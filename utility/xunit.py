"""Write the results of a suite run as an xUnit file."""

import os
from datetime import timedelta

from junitparser import (
    Failure,
    JUnitXml,
    Properties,
    Property,
    Skipped,
    TestCase,
    TestSuite,
)

from utility.log import Log

log = Log(__name__)

NOT_AVAILABLE = "--NA--"


def _properties(**values):
    props = Properties()
    for name, value in values.items():
        props.append(Property(name=name, value=value))
    return props


def generate_test_case(
    name, duration, status, err_type=None, err_msg=None, err_text=None, resource=None
):
    """
    Convert one test result of the runner into a junit test case.

    Args:
        name: test name
        duration: timedelta of the run, anything else counts as 0s
        status: Pass, Skipped or Failed
        resource: resource or data source type covered by the test

    Returns:
        junitparser TestCase
    """
    test_case = TestCase(name)
    test_case.time = duration.total_seconds() if isinstance(duration, timedelta) else 0.0

    if status == "Skipped":
        test_case.result = [Skipped(err_msg)] if err_msg else [Skipped()]
    elif status != "Pass":
        failure = Failure(err_msg, err_type)
        failure.text = err_text
        test_case.result = [failure]

    if resource:
        test_case.append(_properties(**{"resource-type": resource}))

    return test_case


def create_xunit_results(suite_name, test_cases, test_run_metadata):
    """
    Write ``xunit.xml`` in the log directory of the run.

    The suite is named after the first suite file and carries the run
    metadata as properties.

    Returns:
        path of the xUnit file
    """
    _file = os.path.splitext(os.path.basename(suite_name.split("::")[0]))[0]
    xml_file = os.path.join(test_run_metadata["log-dir"], "xunit.xml")
    test_run_id = f"HWCLOUD-{_file}-{test_run_metadata['run-id']}".replace(".", "-")
    log.info(f"Creating xUnit {_file} for test run-id {test_run_id}")

    suite = TestSuite(_file)
    for k, v in test_run_metadata.items():
        suite.add_property(k, f" {v}" if v else f" {NOT_AVAILABLE}")

    for tc in test_cases:
        suite.add_testcase(
            generate_test_case(
                tc["name"],
                tc.get("duration"),
                tc["status"],
                err_type=tc.get("err_type"),
                err_msg=tc.get("err_msg"),
                err_text=tc.get("err_text"),
                resource=tc.get("resource"),
            )
        )
    suite.update_statistics()

    xml = JUnitXml()
    xml.append(
        _properties(
            **{
                "testrun-id": test_run_id,
                "region": test_run_metadata.get("region") or NOT_AVAILABLE,
            }
        )
    )
    xml.add_testsuite(suite)
    xml.write(xml_file, pretty=True)

    log.info(f"xUnit result file created: {xml_file}")
    return xml_file
