from metaldata.claims.release import ReleaseCoordinator
from metaldata.claims.resolver import PoolResolver
from metaldata.errors import ConflictError
from metaldata.models import Metal3Data, Metal3IPPool, OwnerReference

from factories import NS, pool, template, world


def _template():
    return template(
        meta_data={"ipAddressesFromIPPool": [{"key": "ip", "name": "pool-a"}]},
        network_data={"networks": {"ipv4": [
            {"id": "n0", "link": "eth0", "ipAddressFromIPPool": "pool-b"},
        ]}},
    )


def _owners(store, name):
    return [r.name for r in store.get(Metal3IPPool, name, NS).metadata.owner_references]


def test_release_removes_marker_from_every_pool():
    tpl = _template()
    other = OwnerReference(api_version="infrastructure.cluster.x-k8s.io/v1alpha4",
                           kind="Metal3Data", name="data-1")
    store = world(tpl, objects=[pool("pool-a", owners=[other]), pool("pool-b")])
    request = store.get(Metal3Data, "data-0", NS)
    PoolResolver(store).resolve(request, tpl)
    assert _owners(store, "pool-a") == ["data-1", "data-0"]

    assert ReleaseCoordinator(store).release(request, tpl) is False
    assert _owners(store, "pool-a") == ["data-1"]
    assert _owners(store, "pool-b") == []


def test_release_is_idempotent():
    tpl = _template()
    store = world(tpl, objects=[pool("pool-a")])
    request = store.get(Metal3Data, "data-0", NS)
    # pool-b does not exist and pool-a has no marker: both count as released
    assert ReleaseCoordinator(store).release(request, tpl) is False
    assert ReleaseCoordinator(store).release(request, tpl) is False


def test_conflict_requeues_but_other_pools_are_released():
    tpl = _template()
    store = world(tpl, objects=[pool("pool-a"), pool("pool-b")])
    request = store.get(Metal3Data, "data-0", NS)
    PoolResolver(store).resolve(request, tpl)

    class ConflictingStore:
        def get(self, model, name, namespace):
            return store.get(model, name, namespace)

        def update(self, obj):
            if obj.metadata.name == "pool-a":
                raise ConflictError("pool-a was modified")
            return store.update(obj)

    assert ReleaseCoordinator(ConflictingStore()).release(request, tpl) is True
    assert _owners(store, "pool-a") == ["data-0"]
    assert _owners(store, "pool-b") == []
