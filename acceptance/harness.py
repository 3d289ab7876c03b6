"""In-process plan/apply loop driving the provider for acceptance tests.

A :class:`TestCase` is a list of :class:`TestStep`. A step either applies a
configuration (creating, updating, replacing and destroying resources until
the state matches it, then running its checks) or imports a resource and
compares the imported attributes with the applied ones. Every resource left
in the state is destroyed when the case ends, whatever its outcome.

Example:
    run_test(
        TestCase(
            pre_check=pre_check,
            check_destroy=rc.check_resource_destroy(),
            steps=[
                TestStep(config=basic, check=compose(...)),
                TestStep(resource_name="huaweicloud_apig_group.test",
                         import_state=True, import_state_verify=True),
            ],
        ),
        provider,
    )
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import requests

from acceptance.exceptions import AcceptanceError, PreCheckError
from acceptance.hcl import DATA, dependency_order, interpolate, parse_config
from acceptance.state import State, flatten
from provider.exceptions import ProviderError
from sdk.exceptions import SDKError
from utility.log import Log

LOG = Log(__name__)

PROVIDER_ERRORS = (ProviderError, SDKError, requests.RequestException)


@dataclass
class TestStep:
    __test__ = False

    config: str = ""
    check: Optional[Callable] = None
    expect_error: Optional[str] = None
    resource_name: str = ""
    import_state: bool = False
    import_state_verify: bool = False
    import_state_id_func: Optional[Callable] = None
    import_state_verify_ignore: List[str] = field(default_factory=list)


@dataclass
class TestCase:
    __test__ = False

    steps: List[TestStep]
    pre_check: Optional[Callable] = None
    check_destroy: Optional[Callable] = None


class Harness(object):
    """Applies configurations through a provider and keeps the resulting state."""

    def __init__(self, provider):
        self.provider = provider
        self.meta = provider.meta
        self.state = State()
        self._applied = {}
        self._order = []

    def _call(self, func, d, action, address):
        try:
            func(d, self.meta)
        except PROVIDER_ERRORS as e:
            raise AcceptanceError(f"{address}: error {action}: {e}") from e

    def _store(self, block, d):
        attributes = d.state()
        if attributes is None:
            self.state.remove(block.address)
            if block.address in self._order:
                self._order.remove(block.address)
            return

        self.state.set(block, attributes)
        if block.mode != DATA and block.address not in self._order:
            self._order.append(block.address)

    def _read_data_source(self, block, body):
        ds = self.provider.data_source(block.type)
        ds.validate(body, block.address)

        d = ds.data(config=body)
        self._call(ds.read, d, "reading data source", block.address)
        if not d.id:
            raise AcceptanceError(f"{block.address}: data source produced no ID")
        self._store(block, d)

    def _apply_resource(self, block, body):
        res = self.provider.resource(block.type)
        res.validate(body, block.address)

        prior = self.state.get(block.address)
        if prior is not None:
            d = res.data(config=body, state=prior.attributes)
            if d.requires_new():
                LOG.info(f"{block.address}: must be replaced")
                self._destroy(block.address)
            else:
                changed = d.changed_keys()
                if not changed:
                    LOG.debug(f"{block.address}: no changes")
                    return
                if res.update is None:
                    raise AcceptanceError(
                        f"{block.address}: update of {changed} is not supported"
                    )
                LOG.info(f"{block.address}: updating {changed}")
                self._call(res.update, d, "updating", block.address)
                self._store(block, d)
                return

        d = res.data(config=body)
        LOG.info(f"{block.address}: creating")
        self._call(res.create, d, "creating", block.address)
        if not d.id:
            raise AcceptanceError(f"{block.address}: provider produced no ID on create")
        self._store(block, d)
        LOG.info(f"{block.address}: creation complete, ID {d.id}")

    def _destroy(self, address):
        rs = self.state[address]
        res = self.provider.resource(rs.type)
        d = res.data(state=rs.attributes)
        LOG.info(f"{address}: destroying {rs.id}")
        self._call(res.delete, d, "deleting", address)
        self.state.remove(address)
        self._order.remove(address)

    def _refresh_and_plan(self):
        """Read back every resource and make sure nothing is left to change."""
        for address, (block, body) in self._applied.items():
            if block.mode == DATA:
                continue

            res = self.provider.resource(block.type)
            d = res.data(state=self.state[address].attributes)
            self._call(res.read, d, "refreshing", address)
            if not d.id:
                raise AcceptanceError(f"{address}: resource is gone after apply")
            self._store(block, d)

            changed = res.data(config=body, state=d.state()).changed_keys()
            if changed:
                raise AcceptanceError(
                    f"After applying this step, the plan was not empty: "
                    f"{address} would change {changed}"
                )

    def apply(self, text):
        """Converge the state to a configuration and refresh it."""
        blocks = dependency_order(parse_config(text))
        wanted = {b.address for b in blocks}

        for address in reversed(list(self._order)):
            if address not in wanted:
                self._destroy(address)
        for rs in list(self.state.resources.values()):
            if rs.mode == DATA and rs.address not in wanted:
                self.state.remove(rs.address)

        self._applied = {}
        for block in blocks:
            body = interpolate(block.body, self.state.attributes())
            if block.mode == DATA:
                self._read_data_source(block, body)
            else:
                self._apply_resource(block, body)
            self._applied[block.address] = (block, body)

        self._refresh_and_plan()

    def import_state(self, step):
        """Import a resource of the state and verify the imported attributes."""
        rs = self.state.get(step.resource_name)
        if rs is None:
            raise AcceptanceError(f"{step.resource_name} is not in the state")

        import_id = step.import_state_id_func(self.state) if step.import_state_id_func else rs.id
        LOG.info(f"{step.resource_name}: importing {import_id}")

        res = self.provider.resource(rs.type)
        try:
            imported = res.import_state(import_id, self.meta)
            for d in imported:
                res.read(d, self.meta)
        except PROVIDER_ERRORS as e:
            raise AcceptanceError(f"{step.resource_name}: error importing: {e}") from e

        if not imported or not imported[0].id:
            raise AcceptanceError(
                f"{step.resource_name}: import of {import_id} returned no resource"
            )

        if step.import_state_verify:
            self._verify_import(step, rs.flat(), flatten(imported[0].state()))

    @staticmethod
    def _verify_import(step, expected, actual):
        ignore = list(step.import_state_verify_ignore) + ["timeouts"]

        def _keep(key):
            return not any(key.startswith(prefix) for prefix in ignore)

        expected = {k: v for k, v in expected.items() if _keep(k)}
        actual = {k: v for k, v in actual.items() if _keep(k)}
        if expected == actual:
            return

        diffs = [
            f"  {k}: state {expected.get(k)!r}, imported {actual.get(k)!r}"
            for k in sorted(set(expected) | set(actual))
            if expected.get(k) != actual.get(k)
        ]
        raise AcceptanceError(
            "ImportStateVerify attributes not equivalent:\n" + "\n".join(diffs)
        )

    def run_step(self, step):
        try:
            if step.import_state:
                self.import_state(step)
                return
            self.apply(step.config)
        except ProviderError as e:
            # invalid configuration or unknown block type
            raise AcceptanceError(str(e)) from e

        if step.check:
            step.check(self.state)

    def destroy_all(self):
        """
        Destroy every resource, newest first.

        Returns:
            (state before the destroy, list of destroy errors)
        """
        snapshot = self.state.copy()
        errors = []
        for address in reversed(list(self._order)):
            try:
                self._destroy(address)
            except AcceptanceError as e:
                LOG.log_error(str(e))
                errors.append(e)
        return snapshot, errors


def run_test(case, provider):
    """
    Run the steps of a test case and destroy what they created.

    Raises:
        PreCheckError       when the environment lacks a setting
        AcceptanceError     when a step, the destroy or the destroy check fails
    """
    if case.pre_check:
        case.pre_check()

    harness = Harness(provider)
    total = len(case.steps)
    try:
        for i, step in enumerate(case.steps, 1):
            LOG.info(f"Running step {i}/{total}")
            try:
                harness.run_step(step)
            except AcceptanceError as e:
                if step.expect_error and re.search(step.expect_error, str(e)):
                    LOG.info(f"Step {i}/{total} failed as expected: {e}")
                    continue
                raise AcceptanceError(f"Step {i}/{total} error: {e}") from e

            if step.expect_error:
                raise AcceptanceError(
                    f"Step {i}/{total}: expected an error matching "
                    f"{step.expect_error!r}, got none"
                )
    finally:
        snapshot, errors = harness.destroy_all()

    if errors:
        raise AcceptanceError(
            "Error running post-test destroy, there may be dangling resources: "
            + "; ".join(map(str, errors))
        )

    if case.check_destroy:
        case.check_destroy(snapshot)


def execute(case, provider):
    """
    Run a test case and translate the outcome into a test module return code.

    Returns:
        0 on success, 1 on failure, -1 when the pre-check skipped the case
    """
    try:
        run_test(case, provider)
    except PreCheckError as e:
        LOG.warning(f"Skipped: {e}")
        return -1
    except AcceptanceError as e:
        LOG.log_error(str(e))
        return 1
    return 0
