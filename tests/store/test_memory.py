import pytest

from metaldata.errors import AlreadyExistsError, ConflictError, NotFoundError, StoreError
from metaldata.models import Metal3Data, Metal3IPPool, Secret
from metaldata.store.memory import MemoryStore

from factories import NS, data, pool


def test_get_returns_a_copy():
    store = MemoryStore([pool("pool-a")])
    p = store.get(Metal3IPPool, "pool-a", NS)
    p.status.allocations["x"] = "y"
    assert store.get(Metal3IPPool, "pool-a", NS).status.allocations == {}


def test_create_assigns_uid_and_version():
    store = MemoryStore()
    created = store.create(data())
    assert created.metadata.uid
    assert created.metadata.resource_version == "1"
    with pytest.raises(AlreadyExistsError):
        store.create(data())


def test_not_found():
    with pytest.raises(NotFoundError):
        MemoryStore().get(Secret, "nope", NS)
    with pytest.raises(NotFoundError):
        MemoryStore().update(pool("pool-a"))


def test_stale_update_conflicts():
    store = MemoryStore([pool("pool-a")])
    first = store.get(Metal3IPPool, "pool-a", NS)
    second = store.get(Metal3IPPool, "pool-a", NS)

    first.spec.name_prefix = "a"
    store.update(first)
    assert first.metadata.resource_version == "2"

    second.spec.name_prefix = "b"
    with pytest.raises(ConflictError):
        store.update(second)
    assert store.get(Metal3IPPool, "pool-a", NS).spec.name_prefix == "a"


def test_same_name_different_kinds_do_not_collide():
    store = MemoryStore([pool("x"), Secret.from_payload(name="x", namespace=NS, key="k", payload=b"v")])
    assert store.get(Secret, "x", NS).payload("k") == b"v"
    assert len(store.list(Metal3IPPool)) == 1


def test_from_documents():
    store = MemoryStore.from_documents([
        {
            "apiVersion": "infrastructure.cluster.x-k8s.io/v1alpha4",
            "kind": "Metal3Data",
            "metadata": {"name": "d", "namespace": "ns1"},
            "spec": {"index": 2, "template": {"name": "tpl"}, "metaData": {"name": "md"}},
        },
        None,
        {
            "apiVersion": "infrastructure.cluster.x-k8s.io/v1alpha4",
            "kind": "Metal3IPPool",
            "metadata": {"name": "pool-a", "namespace": "ns1"},
            "status": {"allocations": {"d": "pool-a-1"}},
        },
    ])
    d = store.get(Metal3Data, "d", "ns1")
    assert d.spec.index == 2
    assert d.spec.meta_data.name == "md"
    assert store.get(Metal3IPPool, "pool-a", "ns1").status.allocations == {"d": "pool-a-1"}
    assert store.list(Metal3Data, "other") == []


def test_from_documents_rejects_unknown_kinds():
    with pytest.raises(StoreError, match="ConfigMap"):
        MemoryStore.from_documents([{"kind": "ConfigMap", "metadata": {"name": "x"}}])
