"""Parse HCL test fixtures and resolve the references between their blocks.

Only the subset of HCL the fixtures use is supported: ``resource`` and
``data`` blocks whose arguments are literals, maps, nested blocks and
references such as ``huaweicloud_apig_environment.test.id`` or
``data.huaweicloud_images_images.test.images[0].id``.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List

import hcl2

from acceptance.exceptions import ConfigParseError
from utility.log import Log

LOG = Log(__name__)

MANAGED = "managed"
DATA = "data"

# block arguments understood by the harness, not by the resource schema
META_ARGUMENTS = ("depends_on", "lifecycle", "provider", "count", "for_each")

_INTERPOLATION = re.compile(r"\$\{([^}]*)\}")
_REFERENCE = re.compile(r"(?:(data)\.)?([A-Za-z_][\w-]*)\.([A-Za-z_][\w-]*)")
_SEGMENT = re.compile(r"[^.\[\]]+")


@dataclass
class Block:
    mode: str
    type: str
    name: str
    body: Dict
    depends_on: List[str] = field(default_factory=list)

    @property
    def address(self):
        if self.mode == DATA:
            return f"data.{self.type}.{self.name}"
        return f"{self.type}.{self.name}"


def _unquote(value):
    if isinstance(value, str) and len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def _clean(value):
    """Drop parser metadata and literal quotes from a parsed value."""
    if isinstance(value, dict):
        return {
            _unquote(k): _clean(v)
            for k, v in value.items()
            if not str(k).startswith("__")
        }
    if isinstance(value, list):
        return [_clean(v) for v in value]
    return _unquote(value)


def _expressions(value):
    if isinstance(value, dict):
        for v in value.values():
            yield from _expressions(v)
    elif isinstance(value, list):
        for v in value:
            yield from _expressions(v)
    elif isinstance(value, str):
        yield from _INTERPOLATION.findall(value)


def references(value, known):
    """Return the addresses of known blocks referenced by a value."""
    found = []
    for expr in _expressions(value):
        for data, rtype, name in _REFERENCE.findall(expr):
            address = f"data.{rtype}.{name}" if data else f"{rtype}.{name}"
            if address in known and address not in found:
                found.append(address)
    return found


def parse_config(text):
    """
    Parse a fixture into its resource and data blocks, in declaration order.

    Raises:
        ConfigParseError    when the text is not valid HCL
    """
    try:
        raw = hcl2.loads(text)
    except Exception as e:
        raise ConfigParseError(f"invalid HCL configuration: {e}") from e

    raw = _clean(raw)
    blocks = []
    for section, mode in (("resource", MANAGED), ("data", DATA)):
        for entry in raw.get(section) or []:
            for rtype, named in entry.items():
                for name, body in named.items():
                    body = dict(body or {})
                    depends_on = body.pop("depends_on", None) or []
                    for arg in META_ARGUMENTS:
                        body.pop(arg, None)
                    blocks.append(
                        Block(
                            mode=mode,
                            type=rtype,
                            name=name,
                            body=body,
                            depends_on=[_INTERPOLATION.sub(r"\1", d) for d in depends_on],
                        )
                    )

    for section in set(raw) - {"resource", "data"}:
        LOG.warning(f"Ignoring unsupported '{section}' section of the configuration")

    return blocks


def dependency_order(blocks):
    """
    Sort blocks so that every block comes after the blocks it references.

    Raises:
        ConfigParseError    on a dependency cycle
    """
    by_address = {b.address: b for b in blocks}
    deps = {
        b.address: set(references(b.body, by_address)) | set(b.depends_on)
        for b in blocks
    }
    for address, needed in deps.items():
        unknown = needed - set(by_address)
        if unknown:
            raise ConfigParseError(
                f"{address} depends on undeclared {', '.join(sorted(unknown))}"
            )

    ordered, done = [], set()
    while len(ordered) < len(blocks):
        ready = [
            b for b in blocks if b.address not in done and deps[b.address] <= done
        ]
        if not ready:
            pending = [b.address for b in blocks if b.address not in done]
            raise ConfigParseError(f"dependency cycle between {', '.join(pending)}")
        for b in ready:
            ordered.append(b)
            done.add(b.address)
    return ordered


def _lookup(expr, states):
    segments = _SEGMENT.findall(expr.strip())
    if segments and segments[0] == DATA:
        address, path = ".".join(segments[:3]), segments[3:]
    else:
        address, path = ".".join(segments[:2]), segments[2:]

    if address not in states:
        raise ConfigParseError(f"reference to unknown resource in '${{{expr}}}'")

    value = states[address]
    for segment in path:
        try:
            if isinstance(value, list):
                value = value[int(segment)]
            else:
                value = value[segment]
        except (KeyError, IndexError, ValueError, TypeError):
            raise ConfigParseError(f"'${{{expr}}}': no attribute '{segment}'")
    return value


def interpolate(value, states):
    """
    Replace the references of a value by the attributes they point to.

    Args:
        value: parsed argument value
        states (dict): address -> attributes of the blocks applied so far

    Raises:
        ConfigParseError    when a reference can not be resolved
    """
    if isinstance(value, dict):
        return {k: interpolate(v, states) for k, v in value.items()}
    if isinstance(value, list):
        return [interpolate(v, states) for v in value]
    if not isinstance(value, str) or "${" not in value:
        return value

    whole = _INTERPOLATION.fullmatch(value)
    if whole:
        return _lookup(whole.group(1), states)

    return _INTERPOLATION.sub(lambda m: str(_lookup(m.group(1), states)), value)
