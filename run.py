#!/usr/bin/env python3

import datetime
import importlib
import os
import sys
import traceback
from getpass import getuser

from docopt import docopt

import init_suite
from acceptance import harness
from provider.exceptions import ProviderError
from provider.provider import Provider
from utility.log import Log
from utility.utils import (
    create_run_dir,
    create_unique_test_name,
    generate_unique_id,
    get_run_status,
)
from utility.xunit import create_xunit_results

doc = """
Runs the acceptance tests of the Huawei Cloud provider listed in yaml suites.

 Usage:
  run.py (--suite <FILE>)...
        [--provider-conf <FILE>]
        [--log-level <LEVEL>]
        [--log-dir  <directory-name>]
        [--skip-tc <items>]
        [--xunit-results]
        [--disable-console-log]
  run.py --list-types [--provider-conf <FILE>]

Options:
  -h --help                         show this screen
  -s <apig> --suite <apig>          test suite (yaml) or directory holding a
                                    suite and its overrides.yaml
                                    eg: -s suites/apig.yaml
  --provider-conf <file>            provider configuration, defaults to
                                    ~/.hwcloud.yaml overlaid by HW_* variables
  --log-level <LEVEL>               Set logging level
  --log-dir <LEVEL>                 Set log directory
  --skip-tc <items>                 skip test modules, comma separated
                                    eg: apig_group,dms_rabbitmq_instance
  --xunit-results                   Create xUnit result file for test suite run
                                    [default: false]
  --disable-console-log             Disable console logs
  --list-types                      Print the supported resource and data
                                    source types
"""
log = Log()
test_names = []

TEST_DIRS = ["tests", "tests/apig", "tests/dms", "tests/dds", "tests/ims"]

STATUS = {0: "Pass", -1: "Skipped"}

COLUMNS = (
    ("name", "TEST NAME", 30),
    ("desc", "TEST DESCRIPTION", 60),
    ("duration", "DURATION", 30),
    ("status", "STATUS", 15),
)


def print_results(tcs):
    print("\n" + "   ".join(f"{title:<{width}s}" for _, title, width in COLUMNS) + "   COMMENTS")
    for tc in tcs:
        row = dict(tc, desc=tc["desc"] or "None", duration=str(tc.get("duration") or "0s"))
        cells = [f"{str(row[key]):<{width}.{width}s}" for key, _, width in COLUMNS]
        print("   ".join(cells) + f"   {tc['comments']}")


def collect_errors(test_mod):
    """Return the errors logged through the Log objects of the test run."""
    loggers = [o for o in vars(test_mod).values() if type(o) is Log]
    loggers.append(harness.LOG)

    errors = []
    for _object in loggers:
        errors.extend(_object._log_errors)
        _object._log_errors = []
    return errors


def fetch_test_details(test, **run_info):
    """Return the result record of a suite entry, before it runs."""
    details = {
        "name": test.get("name"),
        "desc": test.get("desc"),
        "file": test.get("module"),
        "resource": test.get("resource"),
        "duration": "0s",
        "status": "Not Executed",
        "comments": test.get("comments", str()),
    }
    details.update(run_info)
    return details


def execute_module(test_mod, tc, provider, config, run_config, skip):
    """
    Call the run function of a test module.

    Failures are recorded on tc, whether they were logged by the module or
    raised from it.

    Returns:
        0 on success, 1 on failure, -1 when skipped
    """
    if skip:
        tc["err_msg"] = "skipped with --skip-tc"
        return -1

    try:
        rc = test_mod.run(provider=provider, config=config, run_config=run_config)
    except Exception as be:  # noqa
        log.exception(be)
        tc["err_type"] = "exception"
        tc["err_msg"] = str(be)
        tc["err_text"] = traceback.format_exc()
        rc = 1

    errors = collect_errors(test_mod)
    if rc == 1 and tc.get("err_type") != "exception":
        tc["err_type"], tc["err_msg"] = "error", "\n".join(map(str, errors))
    return rc


def run(args):
    import urllib3

    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    suite_files = args["--suite"]
    provider_conf = args.get("--provider-conf")
    disable_console_log = args.get("--disable-console-log", False)
    skip_tc = args.get("--skip-tc")
    skip_tc_list = [item.strip() for item in skip_tc.split(",")] if skip_tc else []

    run_id = generate_unique_id(length=6)
    run_dir = create_run_dir(run_id, args.get("--log-dir"))

    log.configure_logger("startup", run_dir, disable_console_log)
    if args.get("--log-level"):
        log.logger.setLevel(args["--log-level"].upper())

    run_start_time = datetime.datetime.now()

    try:
        provider = Provider.from_config_file(provider_conf)
    except ProviderError as e:
        log.error(f"Unable to configure the provider: {e}")
        return 1

    suite = init_suite.load_suites(suite_files)
    if suite["nan"]:
        log.error(f"Unable to load the suite(s): {', '.join(suite['nan'])}")
        return 1

    suite_name = "::".join(suite_files)
    log.info(f"Running acceptance suite {suite_name} in {provider.meta.region}")

    test_run_metadata = {
        "jenkin-url": os.environ.get("BUILD_URL"),
        "suite-name": suite_name,
        "conf-file": provider_conf,
        "region": provider.meta.region,
        "log-dir": run_dir,
        "run-id": run_id,
        "invoked-by": getuser(),
    }

    for test_dir in TEST_DIRS:
        sys.path.append(os.path.abspath(test_dir))

    tcs = []
    run_config = {"log_dir": run_dir, "run_id": run_id}

    for test in suite.get("tests"):
        test = test.get("test")
        tc = fetch_test_details(test, **test_run_metadata)
        unique_test_name = create_unique_test_name(tc["name"], test_names)
        test_names.append(unique_test_name)

        tc["log-link"] = log.configure_logger(unique_test_name, run_dir, disable_console_log)
        run_config.update({"test_name": unique_test_name, "log_link": tc["log-link"]})

        mod_file_name = os.path.splitext(tc["file"])[0]
        test_mod = importlib.import_module(mod_file_name)
        print(f"\nRunning test: {tc['name']}")
        if tc.get("log-link"):
            print(f"Test logfile location: {tc['log-link']}")
        log.info(f"Running test {tc['file']}")

        start = datetime.datetime.now()
        rc = execute_module(
            test_mod,
            tc,
            provider,
            test.get("config") or {},
            run_config,
            skip=mod_file_name in skip_tc_list,
        )
        tc["duration"] = datetime.datetime.now() - start
        tc["status"] = STATUS.get(rc, "Failed")
        tcs.append(tc)

        msg = f"Test {mod_file_name} {tc['status']}"
        log.info(msg)
        print(msg)

        if tc["status"] == "Failed" and test.get("abort-on-fail", False):
            log.info("Aborting on test failure")
            break

    log.info(f"\nAll test logs located here: {run_dir}")
    log.close_and_remove_filehandlers()

    if args.get("--xunit-results", False):
        create_xunit_results(suite_name, tcs, test_run_metadata)

    print(f"\nAll test logs located here: {run_dir}")
    print_results(tcs)

    minutes, seconds = divmod((datetime.datetime.now() - run_start_time).total_seconds(), 60)
    print(f"\nTotal time: {int(minutes)} mins, {int(seconds)} secs")

    return get_run_status(tcs)


def list_types(args):
    provider = Provider.from_config_file(args.get("--provider-conf"))
    for title, names in (
        ("Resources", provider.resource_types),
        ("Data sources", provider.data_source_types),
    ):
        print(f"{title}:")
        for name in names:
            print(f"  {name}")
    return 0


if __name__ == "__main__":
    args = docopt(doc)
    rc = list_types(args) if args.get("--list-types") else run(args)
    log.info("final rc of test run %d" % rc)
    sys.exit(rc)
