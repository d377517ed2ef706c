import itertools

import pytest
from google.api_core.exceptions import AlreadyExists

from study_companion import server as server_module


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, store, collection_name, doc_id):
        self._store = store
        self._collection_name = collection_name
        self.id = doc_id

    def _docs(self):
        return self._store.data.setdefault(self._collection_name, {})

    def set(self, data, merge=False):
        if self._store.fail_writes_to == self._collection_name:
            raise RuntimeError(f"write to {self._collection_name} failed")
        docs = self._docs()
        if merge and self.id in docs:
            docs[self.id].update(dict(data))
        else:
            docs[self.id] = dict(data)

    def create(self, data):
        if self.id in self._docs():
            raise AlreadyExists(f"{self._collection_name}/{self.id} already exists")
        self.set(data)

    def update(self, data):
        self._docs()[self.id].update(dict(data))

    def get(self, transaction=None):
        return FakeSnapshot(self.id, self._docs().get(self.id))

    def delete(self):
        self._docs().pop(self.id, None)


class FakeQuery:
    def __init__(self, store, collection_name, filters=(), limit_count=None, ordering=None):
        self._store = store
        self._collection_name = collection_name
        self._filters = list(filters)
        self._limit = limit_count
        self._ordering = ordering

    def _copy(self, **changes):
        state = {
            "filters": self._filters,
            "limit_count": self._limit,
            "ordering": self._ordering,
        }
        state.update(changes)
        return FakeQuery(self._store, self._collection_name, **state)

    def where(self, *args, **kwargs):
        if "filter" in kwargs:
            raise TypeError("filter keyword unsupported")
        field_path, op_string, value = args
        assert op_string == "=="
        return self._copy(filters=self._filters + [(field_path, value)])

    def order_by(self, field_path, direction="ASCENDING"):
        return self._copy(ordering=(field_path, direction == "DESCENDING"))

    def limit(self, count):
        return self._copy(limit_count=count)

    def stream(self):
        docs = self._store.data.get(self._collection_name, {})
        rows = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in docs.items()
            if all(data.get(field) == value for field, value in self._filters)
        ]
        if self._ordering:
            field_path, descending = self._ordering
            # Firestore leaves out documents that lack the ordered field.
            rows = [row for row in rows if field_path in row._data]
            rows.sort(key=lambda row: row._data[field_path], reverse=descending)
        return iter(rows[:self._limit] if self._limit else rows)


class FakeCollection(FakeQuery):
    def __init__(self, store, name):
        super().__init__(store, name)
        self.id = name

    def document(self, doc_id=None):
        if doc_id is None:
            doc_id = f"doc-{next(self._store.ids)}"
        return FakeDocumentRef(self._store, self._collection_name, doc_id)


class FakeFirestore:
    def __init__(self):
        self.data = {}
        self.ids = itertools.count(1)
        self.fail_writes_to = None

    def collection(self, name):
        return FakeCollection(self, name)

    def collections(self):
        return [FakeCollection(self, name) for name in self.data]


@pytest.fixture()
def fake_db(monkeypatch):
    db = FakeFirestore()
    monkeypatch.setattr(server_module, "db", db)
    return db


@pytest.fixture(autouse=True)
def isolated_runtime(monkeypatch):
    monkeypatch.setattr(server_module, "sentry_sdk", None)
    monkeypatch.setattr(server_module, "RATE_LIMIT_FIRESTORE_ENABLED", False)
    monkeypatch.setattr(server_module, "db", None)
    server_module.RATE_LIMIT_EVENTS.clear()
    yield
    server_module.RATE_LIMIT_EVENTS.clear()


@pytest.fixture()
def client():
    server_module.app.config["TESTING"] = True
    with server_module.app.test_client() as test_client:
        yield test_client
