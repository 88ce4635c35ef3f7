import pytest
import yaml

from metaldata.claims.resolver import AddressCache, PoolAddress
from metaldata.errors import InterfaceNotFound, PoolNotResolved, UnknownObjectKind
from metaldata.render import ObjectKind, build_meta_data, render_meta_data
from metaldata.render.meta_data import index_value

from factories import data, node, template


def _build(meta_data, *, index=0, cache=None, nics=None):
    tpl = template(meta_data=meta_data)
    kwargs = {} if nics is None else {"nics": nics}
    return build_meta_data(
        data(index=index), tpl.spec.meta_data, cache or AddressCache(), node(**kwargs),
    )


def test_index_rule_with_prefix():
    md = _build({"indexes": [{"key": "hostname", "prefix": "node-", "offset": 0, "step": 1}]}, index=3)
    assert md == {"hostname": "node-3"}


def test_index_value_arithmetic():
    assert index_value("", 10, 2, 3, "") == "16"
    assert index_value("a-", 0, 0, 4, "-z") == "a-4-z"   # step 0 behaves like 1
    assert index_value("", 5, -1, 2, "") == "3"


def test_object_names_labels_annotations():
    md = _build({
        "objectNames": [
            {"key": "m3m", "object": "metal3machine"},
            {"key": "machine", "object": "Machine"},
            {"key": "bmh", "object": "BAREMETALHOST"},
        ],
        "fromLabels": [
            {"key": "role", "object": "metal3machine", "label": "role"},
            {"key": "zone", "object": "baremetalhost", "label": "zone"},
            {"key": "missing", "object": "machine", "label": "nope"},
        ],
        "fromAnnotations": [
            {"key": "rack", "object": "machine", "annotation": "rack"},
        ],
        "namespaces": [{"key": "ns"}],
    })
    assert md == {
        "m3m": "m3m-0",
        "machine": "machine-0",
        "bmh": "host-0",
        "role": "worker",
        "zone": "a",
        "missing": "",
        "rack": "r12",
        "ns": "default",
    }


def test_pool_values():
    cache = AddressCache({"pool-a": PoolAddress("10.0.0.5", 24, "10.0.0.1")})
    md = _build({
        "ipAddressesFromIPPool": [{"key": "ip", "name": "pool-a"}],
        "prefixesFromIPPool": [{"key": "prefix", "name": "pool-a"}],
        "gatewaysFromIPPool": [{"key": "gw", "name": "pool-a"}],
    }, cache=cache)
    assert md == {"ip": "10.0.0.5", "prefix": "24", "gw": "10.0.0.1"}


def test_unresolved_pool_is_an_error():
    cache = AddressCache({"pool-a": PoolAddress()})
    with pytest.raises(PoolNotResolved, match="pool-a"):
        _build({"ipAddressesFromIPPool": [{"key": "ip", "name": "pool-a"}]}, cache=cache)
    with pytest.raises(PoolNotResolved, match="pool-b"):
        _build({"gatewaysFromIPPool": [{"key": "gw", "name": "pool-b"}]})


def test_host_interface_mac():
    md = _build({"fromHostInterfaces": [{"key": "mac", "interface": "eth1"}]})
    assert md == {"mac": "00:00:00:00:00:02"}


def test_unknown_interface_is_an_error():
    with pytest.raises(InterfaceNotFound, match="eth9"):
        _build({"fromHostInterfaces": [{"key": "mac", "interface": "eth9"}]})


def test_host_without_nics_is_an_error():
    with pytest.raises(InterfaceNotFound, match="eth0"):
        _build({"fromHostInterfaces": [{"key": "mac", "interface": "eth0"}]}, nics={})
    tpl = template(meta_data={"fromHostInterfaces": [{"key": "mac", "interface": "eth0"}]})
    with pytest.raises(InterfaceNotFound, match="not populated"):
        build_meta_data(data(), tpl.spec.meta_data, AddressCache(), node(nics=None))


def test_unknown_object_kind_is_an_error():
    with pytest.raises(UnknownObjectKind, match="cluster"):
        _build({"objectNames": [{"key": "x", "object": "cluster"}]})
    with pytest.raises(UnknownObjectKind):
        ObjectKind.parse("")


def test_strings_win_on_key_collision():
    md = _build({
        "strings": [{"key": "hostname", "value": "fixed"}],
        "indexes": [{"key": "hostname", "prefix": "node-"}],
    }, index=1)
    assert md == {"hostname": "fixed"}


def test_render_is_yaml_and_stable():
    tpl = template(meta_data={
        "strings": [{"key": "b", "value": "2"}, {"key": "a", "value": "1"}],
        "indexes": [{"key": "idx", "offset": 100}],
    })
    first = render_meta_data(data(index=7), tpl, AddressCache(), node())
    second = render_meta_data(data(index=7), tpl, AddressCache(), node())
    assert first == second
    assert yaml.safe_load(first) == {"a": "1", "b": "2", "idx": "107"}
    assert first.index(b"a:") < first.index(b"b:")


def test_no_metadata_section_renders_nothing():
    assert render_meta_data(data(), template(), AddressCache(), node()) is None
