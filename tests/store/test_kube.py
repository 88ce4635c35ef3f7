import pytest
from kubernetes.client.exceptions import ApiException

from metaldata.errors import AlreadyExistsError, ConflictError, NotFoundError, StoreError
from metaldata.models import Metal3Data, Metal3IPPool, Secret
from metaldata.store.kube import KubeStore

from factories import NS, data, pool


class FakeCustomApi:
    def __init__(self, objects=None, fail=None):
        self.objects = objects or {}
        self.fail = fail
        self.calls = []

    def _check(self):
        if self.fail is not None:
            raise ApiException(status=self.fail, reason="boom")

    def get_namespaced_custom_object(self, group, version, namespace, plural, name):
        self.calls.append(("get", group, version, namespace, plural, name))
        self._check()
        try:
            return self.objects[(plural, namespace, name)]
        except KeyError:
            raise ApiException(status=404, reason="Not Found")

    def create_namespaced_custom_object(self, group, version, namespace, plural, body):
        self.calls.append(("create", group, version, namespace, plural, body))
        self._check()
        body = dict(body, metadata=dict(body["metadata"], resourceVersion="1"))
        self.objects[(plural, namespace, body["metadata"]["name"])] = body
        return body

    def replace_namespaced_custom_object(self, group, version, namespace, plural, name, body):
        self.calls.append(("replace", group, version, namespace, plural, name, body))
        self._check()
        body = dict(body, metadata=dict(body["metadata"], resourceVersion="2"))
        return body

    def replace_namespaced_custom_object_status(self, group, version, namespace, plural, name, body):
        self.calls.append(("status", group, version, namespace, plural, name, body))
        self._check()
        return dict(body, metadata=dict(body["metadata"], resourceVersion="3"))


class FakeCoreApi:
    def __init__(self):
        self.secrets = {}

    def read_namespaced_secret(self, name, namespace):
        try:
            return self.secrets[(namespace, name)]
        except KeyError:
            raise ApiException(status=404, reason="Not Found")

    def create_namespaced_secret(self, namespace, body):
        key = (namespace, body["metadata"]["name"])
        if key in self.secrets:
            raise ApiException(status=409, reason="AlreadyExists")
        self.secrets[key] = body
        return body


def _store(custom=None, core=None):
    return KubeStore(custom_api=custom or FakeCustomApi(), core_api=core or FakeCoreApi())


def test_get_custom_object_uses_group_version_plural():
    raw = pool("pool-a", allocations={"data-0": "pool-a-1"}).to_wire()
    custom = FakeCustomApi({("metal3ippools", NS, "pool-a"): raw})
    p = _store(custom).get(Metal3IPPool, "pool-a", NS)
    assert p.status.allocations == {"data-0": "pool-a-1"}
    assert custom.calls[0] == (
        "get", "infrastructure.cluster.x-k8s.io", "v1alpha4", NS, "metal3ippools", "pool-a",
    )


def test_not_found_maps_to_not_found_error():
    with pytest.raises(NotFoundError):
        _store().get(Metal3Data, "missing", NS)
    with pytest.raises(NotFoundError):
        _store().get(Secret, "missing", NS)


def test_create_secret_twice_is_already_exists():
    store = _store()
    secret = Secret.from_payload(name="md", namespace=NS, key="metaData", payload=b"a: b\n")
    store.create(secret)
    assert store.get(Secret, "md", NS).payload("metaData") == b"a: b\n"
    with pytest.raises(AlreadyExistsError):
        store.create(secret)


def test_create_drops_resource_version():
    custom = FakeCustomApi()
    request = data()
    request.metadata.resource_version = "42"
    _store(custom).create(request)
    body = custom.calls[0][-1]
    assert "resourceVersion" not in body["metadata"]
    assert body["kind"] == "Metal3Data"
    assert body["apiVersion"] == "infrastructure.cluster.x-k8s.io/v1alpha4"


def test_update_conflict_maps_to_conflict_error():
    with pytest.raises(ConflictError):
        _store(FakeCustomApi(fail=409)).update(pool("pool-a"))


def test_update_refreshes_resource_version():
    p = pool("pool-a")
    _store().update(p)
    assert p.metadata.resource_version == "2"


def test_update_status_goes_to_status_subresource():
    custom = FakeCustomApi()
    request = data()
    request.status.ready = True
    _store(custom).update_status(request)
    op, group, version, namespace, plural, name, body = custom.calls[0]
    assert (op, plural, name) == ("status", "metal3datas", "data-0")
    assert body["status"]["ready"] is True
    assert request.metadata.resource_version == "3"


def test_other_api_errors_are_store_errors():
    with pytest.raises(StoreError) as e:
        _store(FakeCustomApi(fail=500)).get(Metal3Data, "d", NS)
    assert not isinstance(e.value, (NotFoundError, ConflictError))
