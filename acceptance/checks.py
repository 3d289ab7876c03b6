"""Check functions run against the state after each test step.

A check is a callable taking the :class:`~acceptance.state.State` and raising
:class:`~acceptance.exceptions.AcceptanceError` when the expectation fails.
"""

import fnmatch

from acceptance.exceptions import AcceptanceError
from sdk.exceptions import NotFoundError
from utility.log import Log

LOG = Log(__name__)


def _primary(state, name):
    rs = state.get(name)
    if rs is None:
        raise AcceptanceError(f"Not found: {name} in the state")
    return rs


def compose(*checks):
    """Run the checks in order, stopping at the first failure."""

    def _check(state):
        for i, check in enumerate(checks, 1):
            try:
                check(state)
            except AcceptanceError as e:
                raise AcceptanceError(f"Check {i}/{len(checks)} error: {e}") from e

    return _check


def check_resource_attr(name, key, value):
    def _check(state):
        flat = _primary(state, name).flat()
        if key not in flat:
            # absent lists and maps are empty, absent strings are ""
            if value == "" or (str(value) == "0" and key.endswith((".#", ".%"))):
                return
            raise AcceptanceError(f"{name}: Attribute '{key}' not found")
        if flat[key] != str(value):
            raise AcceptanceError(
                f"{name}: Attribute '{key}' expected {value!r}, got {flat[key]!r}"
            )

    return _check


def check_resource_attr_set(name, key):
    def _check(state):
        flat = _primary(state, name).flat()
        if flat.get(key, "") == "":
            raise AcceptanceError(f"{name}: Attribute '{key}' expected to be set")

    return _check


def check_no_resource_attr(name, key):
    def _check(state):
        flat = _primary(state, name).flat()
        if key not in flat:
            return
        if key.endswith((".#", ".%")) and flat[key] == "0":
            return
        raise AcceptanceError(
            f"{name}: Attribute '{key}' found when not expected: {flat[key]!r}"
        )

    return _check


def check_resource_attr_pair(name, key, other_name, other_key):
    def _check(state):
        value = _primary(state, name).flat().get(key, "")
        other = _primary(state, other_name).flat().get(other_key, "")
        if value != other:
            raise AcceptanceError(
                f"{name}: Attribute '{key}' expected {other!r} "
                f"({other_name}.{other_key}), got {value!r}"
            )

    return _check


def check_type_set_elem_attr(name, key, value):
    """Check that one element of a set or list matches, e.g. key="zones.*"."""

    def _check(state):
        flat = _primary(state, name).flat()
        for k, v in flat.items():
            if fnmatch.fnmatchcase(k, key) and not k.endswith((".#", ".%")):
                if v == str(value):
                    return
        raise AcceptanceError(f"{name}: no element of '{key}' is {value!r}")

    return _check


class ResourceCheck(object):
    """
    Existence and destruction checks of a managed resource.

    Args:
        name (str): address of the resource, e.g. huaweicloud_apig_group.test
        get_func (callable): get_func(cfg, resource_state) fetching the remote
            object, raising NotFoundError when it does not exist
        cfg (Config): provider configuration passed to get_func
    """

    def __init__(self, name, get_func, cfg):
        self.name = name
        self.resource_type = name.split(".")[0]
        self.get_func = get_func
        self.cfg = cfg
        self.object = None

    def check_resource_exists(self):
        def _check(state):
            rs = _primary(state, self.name)
            if not rs.id:
                raise AcceptanceError(f"No id is set for {self.name}")
            try:
                self.object = self.get_func(self.cfg, rs)
            except NotFoundError as e:
                raise AcceptanceError(f"{self.name} not found: {e}")

        return _check

    def check_resource_destroy(self):
        def _check(state):
            for rs in state.managed():
                if rs.type != self.resource_type:
                    continue
                try:
                    self.get_func(self.cfg, rs)
                except NotFoundError:
                    LOG.debug(f"{rs.address} ({rs.id}) is destroyed")
                    continue
                raise AcceptanceError(f"{rs.address} ({rs.id}) still exists")

        return _check


class DataSourceCheck(object):
    def __init__(self, name):
        self.name = name

    def check_resource_exists(self):
        def _check(state):
            rs = _primary(state, self.name)
            if not rs.id:
                raise AcceptanceError(f"Can't find {self.name} in state")

        return _check
