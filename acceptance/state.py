"""State of the blocks applied by the acceptance harness."""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Dict

from acceptance.hcl import DATA, MANAGED


def _flat_value(value):
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten(attributes, prefix=""):
    """
    Flatten nested attributes into the dotted form used by the checks.

    Lists and sets give ``name.#`` (the count) and ``name.N`` entries, maps give
    ``name.%`` and ``name.key`` entries.

    Example:
        {"tags": {"a": "1"}, "zones": ["x"]}
        -> {"tags.%": "1", "tags.a": "1", "zones.#": "1", "zones.0": "x"}
    """
    flat = {}
    for key, value in attributes.items():
        path = f"{prefix}{key}"
        if value is None:
            continue
        if isinstance(value, dict):
            flat[f"{path}.%"] = str(len(value))
            flat.update(flatten(value, f"{path}."))
        elif isinstance(value, list):
            flat[f"{path}.#"] = str(len(value))
            flat.update(flatten(dict(zip(map(str, range(len(value))), value)), f"{path}."))
        else:
            flat[path] = _flat_value(value)
    return flat


@dataclass
class ResourceState:
    mode: str
    type: str
    name: str
    attributes: Dict = field(default_factory=dict)

    @property
    def id(self):
        return self.attributes.get("id", "")

    @property
    def address(self):
        if self.mode == DATA:
            return f"data.{self.type}.{self.name}"
        return f"{self.type}.{self.name}"

    def flat(self):
        return flatten(self.attributes)


class State(object):
    """Applied blocks by address, in creation order."""

    def __init__(self):
        self.resources = {}

    def __contains__(self, address):
        return address in self.resources

    def __getitem__(self, address):
        return self.resources[address]

    def get(self, address):
        return self.resources.get(address)

    def set(self, block, attributes):
        self.resources[block.address] = ResourceState(
            mode=block.mode,
            type=block.type,
            name=block.name,
            attributes=deepcopy(attributes),
        )

    def remove(self, address):
        self.resources.pop(address, None)

    def managed(self):
        return [r for r in self.resources.values() if r.mode == MANAGED]

    def attributes(self):
        """Address -> attributes map used to resolve references."""
        return {a: r.attributes for a, r in self.resources.items()}

    def copy(self):
        other = State()
        other.resources = deepcopy(self.resources)
        return other
