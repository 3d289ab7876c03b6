import mock
import pytest

from acceptance import harness
from provider.exceptions import ProviderError
from provider.provider import Provider
from provider.schema import (
    Resource,
    Schema,
    ValueType,
    import_state_passthrough,
)
from sdk.exceptions import NotFoundError

STRING = ValueType.STRING


class FakeCloud(object):
    """In-memory backend of the fake_thing resource and fake_lookup data source."""

    def __init__(self):
        self.things = {}
        self.calls = []
        self.counter = 0
        self.fail_delete = False
        self.upper_names = False

    def get(self, cfg, rs):
        if rs.id not in self.things:
            raise NotFoundError(404, "GET", f"fake://things/{rs.id}")
        return self.things[rs.id]

    def _store(self, d):
        name = d.get("name")
        self.things[d.id] = {
            "name": name.upper() if self.upper_names else name,
            "size": d.get("size"),
            "zone": d.get("zone"),
            "parent": d.get("parent"),
            "tags": d.get("tags"),
        }

    def create(self, d, meta):
        self.counter += 1
        d.set_id(f"thing-{self.counter}")
        self._store(d)
        self.calls.append(("create", d.id))
        self.read(d, meta)

    def read(self, d, meta):
        thing = self.things.get(d.id)
        if thing is None:
            d.set_id("")
            return
        d.set_many(dict(thing, status="ACTIVE")).raise_if_any("error reading thing")

    def update(self, d, meta):
        self._store(d)
        self.calls.append(("update", d.id))
        self.read(d, meta)

    def delete(self, d, meta):
        if self.fail_delete:
            raise ProviderError(f"error deleting thing {d.id}: refused")
        self.things.pop(d.id)
        self.calls.append(("delete", d.id))
        d.set_id("")

    def lookup(self, d, meta):
        name = d.get("name")
        d.set_id(name)
        d.set("ids", sorted(k for k, v in self.things.items() if v["name"] == name))

    def resource(self):
        return Resource(
            create=self.create,
            read=self.read,
            update=self.update,
            delete=self.delete,
            importer=import_state_passthrough,
            schema={
                "name": Schema(STRING, required=True),
                "size": Schema(ValueType.INT, optional=True, default=1),
                "zone": Schema(STRING, optional=True, force_new=True),
                "parent": Schema(STRING, optional=True),
                "tags": Schema(ValueType.MAP, optional=True, elem=Schema(STRING)),
                "status": Schema(STRING, computed=True),
            },
        )

    def data_source(self):
        return Resource(
            read=self.lookup,
            schema={
                "name": Schema(STRING, required=True),
                "ids": Schema(ValueType.LIST, computed=True, elem=Schema(STRING)),
            },
        )


@pytest.fixture
def cloud():
    return FakeCloud()


@pytest.fixture
def provider(cloud):
    return Provider(
        mock.Mock(region="cn-north-4"),
        resources={"fake_thing": cloud.resource},
        data_sources={"fake_lookup": cloud.data_source},
    )


@pytest.fixture(autouse=True)
def clear_logged_errors():
    yield
    harness.LOG._log_errors = []
