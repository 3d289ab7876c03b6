"""Declarative resource schema and the per-operation resource data.

A :class:`Resource` describes the attributes of one resource (or data source)
type and the callbacks implementing its lifecycle. Each callback receives a
:class:`ResourceData` giving access to the configuration being applied, the
prior state and the values written by the callback itself, plus the provider
:class:`~provider.config.Config` as ``meta``.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from provider.exceptions import AttributeSetError, MultiError, ValidationError
from utility.log import Log

LOG = Log(__name__)

TIMEOUT_CREATE = "create"
TIMEOUT_READ = "read"
TIMEOUT_UPDATE = "update"
TIMEOUT_DELETE = "delete"
TIMEOUT_DEFAULT = "default"

DEFAULT_TIMEOUT = 20 * 60

_DURATION = re.compile(r"(\d+(?:\.\d+)?)(h|m|s)")
_UNITS = {"h": 3600, "m": 60, "s": 1}


class ValueType(Enum):
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    LIST = "list"
    SET = "set"
    MAP = "map"


def parse_duration(value) -> int:
    """Convert a duration such as "50m" or "1h30m" into seconds."""
    if isinstance(value, (int, float)):
        return int(value)

    text = str(value).strip()
    matches = _DURATION.findall(text)
    if not matches or "".join(n + u for n, u in matches) != text:
        raise ValueError(f"invalid duration '{value}'")

    return int(sum(float(n) * _UNITS[u] for n, u in matches))


def is_zero(value) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, dict, tuple, set)):
        return len(value) == 0
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _sort_key(value):
    return json.dumps(value, sort_keys=True, default=str)


@dataclass
class Schema:
    """Definition of one attribute.

    ``elem`` is a :class:`Schema` for the elements of a primitive list, set or
    map, or a :class:`Resource` for nested blocks.
    """

    type: ValueType
    required: bool = False
    optional: bool = False
    computed: bool = False
    force_new: bool = False
    sensitive: bool = False
    default: Any = None
    deprecated: str = ""
    description: str = ""
    conflicts_with: List[str] = field(default_factory=list)
    at_least_one_of: List[str] = field(default_factory=list)
    elem: Any = None
    max_items: int = 0
    validate: Optional[Callable] = None

    @property
    def is_block(self) -> bool:
        return isinstance(self.elem, Resource)

    @property
    def computed_only(self) -> bool:
        return self.computed and not self.optional and not self.required

    def zero(self):
        return {
            ValueType.STRING: "",
            ValueType.INT: 0,
            ValueType.FLOAT: 0.0,
            ValueType.BOOL: False,
            ValueType.LIST: [],
            ValueType.SET: [],
            ValueType.MAP: {},
        }[self.type]

    def _coerce_elem(self, value):
        if self.is_block:
            if not isinstance(value, dict):
                raise ValueError(f"expected a block, got {type(value).__name__}")
            return self.elem.normalize(value)
        if isinstance(self.elem, Schema):
            return self.elem.coerce(value)
        return Schema(ValueType.STRING).coerce(value)

    def coerce(self, value):
        """Return the value converted to the attribute type.

        Sets are returned as sorted lists without duplicates so that two sets
        holding the same elements compare equal regardless of their order.

        Raises:
            ValueError  when the value can not be converted
        """
        if value is None:
            return None

        if self.type == ValueType.STRING:
            if isinstance(value, bool):
                return "true" if value else "false"
            if isinstance(value, (str, int, float)):
                return str(value)
            raise ValueError(f"expected a string, got {type(value).__name__}")

        if self.type == ValueType.INT:
            if isinstance(value, bool):
                raise ValueError("expected a number, got bool")
            if isinstance(value, float) and not value.is_integer():
                raise ValueError(f"expected an integer, got {value}")
            return int(value)

        if self.type == ValueType.FLOAT:
            if isinstance(value, bool):
                raise ValueError("expected a number, got bool")
            return float(value)

        if self.type == ValueType.BOOL:
            if isinstance(value, bool):
                return value
            if isinstance(value, str) and value.lower() in ("true", "false"):
                return value.lower() == "true"
            raise ValueError(f"expected a bool, got {value!r}")

        if self.type == ValueType.MAP:
            if not isinstance(value, dict):
                raise ValueError(f"expected a map, got {type(value).__name__}")
            return {str(k): self._coerce_elem(v) for k, v in value.items()}

        if isinstance(value, dict) and self.is_block:
            value = [value]
        if not isinstance(value, (list, tuple, set)):
            raise ValueError(f"expected a list, got {type(value).__name__}")

        items = [self._coerce_elem(v) for v in value]
        if self.type == ValueType.SET:
            unique = {_sort_key(v): v for v in items}
            return [unique[k] for k in sorted(unique)]
        return items

    def comparable(self, value):
        """Normalized form used to detect changes."""
        if value is None:
            return self.zero()
        return value


@dataclass
class ResourceTimeout:
    create: Optional[int] = None
    read: Optional[int] = None
    update: Optional[int] = None
    delete: Optional[int] = None
    default: int = DEFAULT_TIMEOUT

    def get(self, kind: str) -> int:
        value = getattr(self, kind, None)
        return value if value is not None else self.default


class Resource(object):
    """Schema and lifecycle callbacks of a resource or data source type."""

    def __init__(
        self,
        schema: Dict[str, Schema],
        create: Optional[Callable] = None,
        read: Optional[Callable] = None,
        update: Optional[Callable] = None,
        delete: Optional[Callable] = None,
        importer: Optional[Callable] = None,
        timeouts: Optional[ResourceTimeout] = None,
        description: str = "",
    ):
        self.schema = schema
        self.create = create
        self.read = read
        self.update = update
        self.delete = delete
        self.importer = importer
        self.timeouts = timeouts
        self.description = description

    @property
    def is_data_source(self) -> bool:
        return self.create is None and self.read is not None

    def sensitive_keys(self) -> List[str]:
        return [k for k, s in self.schema.items() if s.sensitive]

    def normalize(self, config: Dict) -> Dict:
        """Apply defaults and convert the configured values to their types."""
        out = {}
        for key, sch in self.schema.items():
            if config.get(key) is not None:
                out[key] = sch.coerce(config[key])
            elif sch.default is not None:
                out[key] = sch.coerce(sch.default)
        return out

    def _validate(self, config, path="") -> List[str]:
        errors = []
        if not isinstance(config, dict):
            return [f"{path or 'block'}: expected a block"]

        for key in config:
            if key == "timeouts" and self.timeouts is not None and not path:
                continue
            if key not in self.schema:
                errors.append(f'An argument named "{path}{key}" is not expected here.')

        for key, sch in self.schema.items():
            full = f"{path}{key}"
            value = config.get(key)
            present = value is not None

            if sch.required and not present:
                errors.append(
                    f'The argument "{full}" is required, but no definition was found.'
                )
            if sch.at_least_one_of and not any(
                config.get(k) is not None for k in sch.at_least_one_of
            ):
                errors.append(
                    f'"{full}": one of `{",".join(sch.at_least_one_of)}` must be specified'
                )
            if not present:
                continue

            if sch.computed_only:
                errors.append(f'"{full}": this field cannot be set')
                continue
            if sch.deprecated:
                LOG.warning(f'Argument "{full}" is deprecated: {sch.deprecated}')
            for other in sch.conflicts_with:
                if config.get(other) is not None:
                    errors.append(f'"{full}": conflicts with {other}')

            try:
                coerced = sch.coerce(value)
            except (TypeError, ValueError) as e:
                errors.append(f'"{full}": {e}')
                continue

            if sch.max_items and len(coerced) > sch.max_items:
                errors.append(
                    f'"{full}": attribute supports {sch.max_items} item maximum, '
                    f"config has {len(coerced)} declared"
                )
            if sch.is_block:
                blocks = [value] if isinstance(value, dict) else value
                for i, block in enumerate(blocks):
                    errors.extend(sch.elem._validate(block, f"{full}.{i}."))
            if sch.validate:
                errors.extend(sch.validate(coerced, full) or [])

        return list(dict.fromkeys(errors))

    def validate(self, config: Dict, address: str = "resource") -> None:
        """Check a configuration against the schema.

        Raises:
            ValidationError     listing every problem found
        """
        errors = self._validate(config)
        if errors:
            raise ValidationError(address, errors)

    def data(self, config=None, state=None, id="") -> "ResourceData":
        return ResourceData(self, config=config, state=state, id=id)

    def import_state(self, import_id: str, meta) -> List["ResourceData"]:
        """Run the importer, returning the resource data to be read."""
        if self.importer is None:
            raise ValidationError(
                import_id, ["resource does not support import"]
            )
        d = ResourceData(self, state={}, id=import_id)
        return self.importer(d, meta)


class ResourceData(object):
    """Attribute access for one resource during one operation.

    Values are looked up in this order: values written with ``set``, the
    configuration being applied (when there is one), the prior state. Optional
    attributes removed from the configuration read as their zero value, while
    computed attributes keep their prior value.
    """

    def __init__(self, resource: Resource, config=None, state=None, id=""):
        self.resource = resource
        self._schema = resource.schema

        self._timeouts = {}
        if config is not None:
            raw_timeouts = config.get("timeouts") or {}
            if isinstance(raw_timeouts, list):
                raw_timeouts = raw_timeouts[0] if raw_timeouts else {}
            self._timeouts = {k: parse_duration(v) for k, v in raw_timeouts.items()}
            config = resource.normalize(config)
        self._config = config

        self._state = {}
        for key, value in (state or {}).items():
            sch = self._schema.get(key)
            self._state[key] = sch.coerce(value) if sch else value

        self._set = {}
        self._id = id or self._state.get("id", "")

    def __repr__(self):
        return f"<ResourceData id={self._id!r}>"

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, value: str) -> None:
        self._id = value or ""

    @property
    def is_new_resource(self) -> bool:
        return not self._state

    def _check_key(self, key):
        if key not in self._schema:
            raise AttributeSetError(f"Invalid address to set: {key!r}")
        return self._schema[key]

    def _new_value(self, key):
        sch = self._schema[key]
        if self._config is not None:
            if key in self._config:
                return self._config[key]
            if not sch.computed:
                return sch.zero()
        if self._state.get(key) is not None:
            return self._state[key]
        return sch.zero()

    def get(self, key: str):
        """Return the value of an attribute, its zero value when unset."""
        if key not in self._schema:
            raise KeyError(f"unknown attribute {key!r}")
        if self._set.get(key) is not None:
            return self._set[key]
        return self._new_value(key)

    def get_ok(self, key: str):
        """Return ``(value, ok)`` where ok is False for unset or zero values."""
        value = self.get(key)
        return value, not is_zero(value)

    def get_change(self, key: str):
        """Return the ``(old, new)`` values of an attribute."""
        sch = self._schema[key]
        return sch.comparable(self._state.get(key)), sch.comparable(self._new_value(key))

    def has_change(self, key: str) -> bool:
        if self._config is None:
            return False
        old, new = self.get_change(key)
        return old != new

    def has_changes(self, *keys: str) -> bool:
        return any(self.has_change(k) for k in keys)

    def changed_keys(self) -> List[str]:
        return [k for k in self._schema if self.has_change(k)]

    def requires_new(self) -> bool:
        """True when a force-new attribute of an existing resource changed."""
        if self.is_new_resource:
            return False
        return any(self.has_change(k) for k, s in self._schema.items() if s.force_new)

    def set(self, key: str, value) -> None:
        """Store a value read from the API.

        Raises:
            AttributeSetError   unknown attribute or value of the wrong type
        """
        sch = self._check_key(key)
        try:
            self._set[key] = sch.coerce(value)
        except (TypeError, ValueError) as e:
            raise AttributeSetError(f"error setting {key}: {e}")

    def set_many(self, values: Dict) -> MultiError:
        """Store several values, collecting every failure instead of stopping.

        Returns:
            MultiError holding the failures, empty when all values were stored
        """
        m_err = MultiError()
        for key, value in values.items():
            try:
                self.set(key, value)
            except AttributeSetError as e:
                m_err.append(e)
        return m_err

    def timeout(self, kind: str) -> int:
        """Return the timeout of an operation in seconds."""
        if kind in self._timeouts:
            return self._timeouts[kind]
        if self.resource.timeouts is None:
            return DEFAULT_TIMEOUT
        return self.resource.timeouts.get(kind)

    def state(self) -> Optional[Dict]:
        """Return the attributes to persist, or None when the ID was cleared."""
        if not self._id:
            return None

        attrs = {}
        for key in self._schema:
            if self._set.get(key) is not None:
                value = self._set[key]
            elif self._config is not None:
                value = self._new_value(key)
            else:
                value = self._state.get(key)
            if value is not None:
                attrs[key] = value

        attrs["id"] = self._id
        return attrs


def import_state_passthrough(d: ResourceData, meta) -> List[ResourceData]:
    """Use the import ID as the resource ID."""
    return [d]


def import_composite_id(*fields: str) -> Callable:
    """Build an importer for IDs of the form ``{field}/.../{id}``.

    Example:
        importer=import_composite_id("instance_id")  # "{instance_id}/{id}"
    """

    def _importer(d: ResourceData, meta) -> List[ResourceData]:
        parts = d.id.split("/")
        if len(parts) != len(fields) + 1 or not all(parts):
            want = "/".join(f"{{{f}}}" for f in fields + ("id",))
            raise ValidationError(
                d.id,
                [f"invalid format specified for import ID, want '{want}', but got '{d.id}'"],
            )

        for key, value in zip(fields, parts):
            d.set(key, value)
        d.set_id(parts[-1])
        return [d]

    return _importer
