import pytest

from provider.exceptions import AttributeSetError, ProviderError, ValidationError
from provider.schema import (
    DEFAULT_TIMEOUT,
    TIMEOUT_CREATE,
    TIMEOUT_DELETE,
    Resource,
    ResourceTimeout,
    Schema,
    ValueType,
    import_composite_id,
    import_state_passthrough,
    is_zero,
    parse_duration,
)
from provider.validation import string_len_between

STRING = ValueType.STRING


@pytest.fixture
def resource():
    return Resource(
        create=lambda d, meta: None,
        read=lambda d, meta: None,
        timeouts=ResourceTimeout(create=3000),
        schema={
            "name": Schema(STRING, required=True, validate=string_len_between(3, 64)),
            "description": Schema(STRING, optional=True),
            "size": Schema(ValueType.INT, optional=True, default=10),
            "vpc_id": Schema(STRING, required=True, force_new=True),
            "zones": Schema(
                ValueType.SET,
                optional=True,
                computed=True,
                elem=Schema(STRING),
                conflicts_with=["zone_list"],
            ),
            "zone_list": Schema(ValueType.LIST, optional=True, elem=Schema(STRING)),
            "status": Schema(STRING, computed=True),
            "tags": Schema(ValueType.MAP, optional=True, elem=Schema(STRING)),
            "rule": Schema(
                ValueType.LIST,
                optional=True,
                max_items=1,
                elem=Resource(schema={"port": Schema(ValueType.INT, required=True)}),
            ),
        },
    )


@pytest.mark.parametrize(
    "value, expected",
    [("50m", 3000), ("1h30m", 5400), ("10s", 10), (60, 60), ("1.5h", 5400)],
)
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["", "5x", "10 m", "m"])
def test_parse_duration_invalid(value):
    with pytest.raises(ValueError):
        parse_duration(value)


def test_is_zero():
    assert is_zero(None) and is_zero("") and is_zero(0) and is_zero([]) and is_zero({})
    assert is_zero(False)
    assert not is_zero("x") and not is_zero(1) and not is_zero(True)


@pytest.mark.parametrize(
    "schema, value, expected",
    [
        (Schema(STRING), 5, "5"),
        (Schema(STRING), True, "true"),
        (Schema(ValueType.INT), 5.0, 5),
        (Schema(ValueType.BOOL), "True", True),
        (Schema(ValueType.SET, elem=Schema(STRING)), ["b", "a", "b"], ["a", "b"]),
        (Schema(ValueType.MAP, elem=Schema(STRING)), {"k": 1}, {"k": "1"}),
        (Schema(ValueType.LIST), [1, 2], ["1", "2"]),
    ],
)
def test_coerce(schema, value, expected):
    assert schema.coerce(value) == expected


@pytest.mark.parametrize(
    "schema, value",
    [
        (Schema(ValueType.INT), 1.5),
        (Schema(ValueType.INT), True),
        (Schema(ValueType.BOOL), "yes"),
        (Schema(ValueType.LIST), "a"),
        (Schema(ValueType.MAP), ["a"]),
        (Schema(STRING), ["a"]),
    ],
)
def test_coerce_invalid(schema, value):
    with pytest.raises(ValueError):
        schema.coerce(value)


def test_set_of_blocks_ignores_order():
    sch = Schema(
        ValueType.SET,
        elem=Resource(schema={"name": Schema(STRING), "value": Schema(STRING)}),
    )
    first = sch.coerce([{"name": "b", "value": "2"}, {"name": "a", "value": "1"}])
    second = sch.coerce([{"name": "a", "value": "1"}, {"name": "b", "value": "2"}])

    assert first == second


def test_normalize_applies_defaults(resource):
    config = resource.normalize({"name": "abc", "vpc_id": "vpc", "rule": {"port": "80"}})

    assert config == {"name": "abc", "vpc_id": "vpc", "size": 10, "rule": [{"port": 80}]}


def test_validate_ok(resource):
    resource.validate(
        {"name": "abc", "vpc_id": "vpc", "zones": ["a"], "timeouts": {"create": "5m"}}
    )


def test_validate_errors(resource):
    config = {
        "name": "ab",
        "zones": ["a"],
        "zone_list": ["a"],
        "status": "RUNNING",
        "unknown": 1,
        "rule": [{"port": 80}, {"port": 81}],
    }

    with pytest.raises(ValidationError) as e:
        resource.validate(config, "huaweicloud_test.test")

    errors = "\n".join(e.value.errors)
    assert e.value.address == "huaweicloud_test.test"
    assert 'An argument named "unknown" is not expected here.' in errors
    assert 'The argument "vpc_id" is required' in errors
    assert '"zones": conflicts with zone_list' in errors
    assert '"status": this field cannot be set' in errors
    assert '"name": expected length to be in the range (3 - 64)' in errors
    assert "attribute supports 1 item maximum" in errors


def test_validate_nested_block(resource):
    with pytest.raises(ValidationError) as e:
        resource.validate({"name": "abc", "vpc_id": "vpc", "rule": {"protocol": "tcp"}})

    errors = "\n".join(e.value.errors)
    assert 'An argument named "rule.0.protocol" is not expected here.' in errors
    assert 'The argument "rule.0.port" is required' in errors


def test_new_resource_data(resource):
    d = resource.data(config={"name": "abc", "vpc_id": "vpc", "zones": ["b", "a"]})

    assert d.is_new_resource
    assert d.get("name") == "abc"
    assert d.get("size") == 10
    assert d.get("zones") == ["a", "b"]
    assert d.get("description") == ""
    assert d.get_ok("description") == ("", False)
    assert d.get_ok("size") == (10, True)
    assert not d.requires_new()
    assert d.id == ""
    assert d.state() is None


def test_unknown_attribute(resource):
    d = resource.data(config={"name": "abc"})

    with pytest.raises(KeyError):
        d.get("nope")
    with pytest.raises(AttributeSetError):
        d.set("nope", 1)


def test_changes_against_state(resource):
    state = {
        "id": "abc-id",
        "name": "abc",
        "vpc_id": "vpc",
        "description": "old",
        "size": 10,
        "status": "RUNNING",
        "zones": ["a", "b"],
        "tags": {"foo": "bar"},
    }
    config = {"name": "abc", "vpc_id": "vpc", "zones": ["b", "a"], "tags": {"foo": "baz"}}

    d = resource.data(config=config, state=state)

    assert d.id == "abc-id"
    assert d.get("status") == "RUNNING"
    assert d.get_change("description") == ("old", "")
    assert d.get_change("tags") == ({"foo": "bar"}, {"foo": "baz"})
    assert sorted(d.changed_keys()) == ["description", "tags"]
    assert not d.has_change("zones")
    assert d.has_changes("name", "tags")
    assert not d.requires_new()

    moved = resource.data(config=dict(config, vpc_id="other"), state=state)
    assert moved.requires_new()


def test_no_config_has_no_change(resource):
    d = resource.data(state={"id": "abc-id", "name": "abc"})

    assert not d.has_change("name")
    assert d.get("name") == "abc"


def test_set_and_state(resource):
    d = resource.data(config={"name": "abc", "vpc_id": "vpc"})
    d.set_id("abc-id")
    d.set("status", "RUNNING")
    d.set("zones", ["b", "a"])

    state = d.state()

    assert state["id"] == "abc-id"
    assert state["status"] == "RUNNING"
    assert state["zones"] == ["a", "b"]
    assert state["size"] == 10
    assert state["description"] == ""

    d.set_id("")
    assert d.state() is None


def test_set_many_collects_errors(resource):
    d = resource.data(state={"id": "abc-id"})

    m_err = d.set_many({"name": "abc", "size": "large", "nope": 1, "status": "RUNNING"})

    assert len(m_err) == 2
    assert d.get("name") == "abc"
    assert d.get("status") == "RUNNING"
    with pytest.raises(ProviderError) as e:
        m_err.raise_if_any("failed to set attributes")
    assert "2 errors occurred" in str(e.value)


def test_timeouts(resource):
    d = resource.data(config={"name": "abc", "timeouts": [{"create": "5m"}]})
    assert d.timeout(TIMEOUT_CREATE) == 300

    d = resource.data(config={"name": "abc"})
    assert d.timeout(TIMEOUT_CREATE) == 3000
    assert d.timeout(TIMEOUT_DELETE) == DEFAULT_TIMEOUT

    plain = Resource(schema={"name": Schema(STRING)})
    assert plain.data(config={}).timeout(TIMEOUT_CREATE) == DEFAULT_TIMEOUT


def test_data_source_flag(resource):
    assert not resource.is_data_source
    assert Resource(schema={}, read=lambda d, meta: None).is_data_source


def test_import_passthrough(resource):
    resource.importer = import_state_passthrough

    imported = resource.import_state("abc-id", None)

    assert [d.id for d in imported] == ["abc-id"]


def test_import_composite_id():
    res = Resource(
        schema={"instance_id": Schema(STRING, required=True)},
        importer=import_composite_id("instance_id"),
    )

    d = res.import_state("inst/grp", None)[0]

    assert d.id == "grp"
    assert d.get("instance_id") == "inst"


@pytest.mark.parametrize("import_id", ["grp", "inst/", "a/b/c"])
def test_import_composite_id_invalid(import_id):
    res = Resource(
        schema={"instance_id": Schema(STRING, required=True)},
        importer=import_composite_id("instance_id"),
    )

    with pytest.raises(ValidationError) as e:
        res.import_state(import_id, None)
    assert "want '{instance_id}/{id}'" in str(e.value)


def test_import_not_supported(resource):
    with pytest.raises(ValidationError):
        resource.import_state("abc-id", None)
