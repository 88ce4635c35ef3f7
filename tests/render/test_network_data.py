import pytest
import yaml

from metaldata.claims.resolver import AddressCache, PoolAddress
from metaldata.errors import InterfaceNotFound, InvalidPrefixLength, PoolNotResolved
from metaldata.render import build_network_data, render, render_network_data

from factories import data, node, template

POOL_A = AddressCache({"pool-a": PoolAddress("10.0.0.5", 24, "10.0.0.1")})


def _static_v4(routes=None):
    network = {"id": "provisioning", "link": "eth0", "ipAddressFromIPPool": "pool-a"}
    if routes is not None:
        network["routes"] = routes
    return template(network_data={"networks": {"ipv4": [network]}})


def test_static_ipv4_network_entry():
    nd = build_network_data(_static_v4(), POOL_A, node().host)
    assert nd["networks"] == [{
        "type": "ipv4",
        "id": "provisioning",
        "link": "eth0",
        "ip_address": "10.0.0.5",
        "netmask": "255.255.255.0",
        "routes": [],
    }]
    assert nd["links"] == []
    assert nd["services"] == []


def test_ipv6_and_dynamic_networks():
    tpl = template(network_data={"networks": {
        "ipv6": [{"id": "v6", "link": "eth1", "ipAddressFromIPPool": "pool-6"}],
        "ipv4DHCP": [{"id": "dhcp4", "link": "eth0"}],
        "ipv6DHCP": [{"id": "dhcp6", "link": "eth0"}],
        "ipv6SLAAC": [{"id": "slaac", "link": "eth1"}],
    }})
    cache = AddressCache({"pool-6": PoolAddress("2001:db8::5", 64, "2001:db8::1")})
    nd = build_network_data(tpl, cache, node().host)
    assert [(n["type"], n["id"]) for n in nd["networks"]] == [
        ("ipv6", "v6"), ("ipv4_dhcp", "dhcp4"), ("ipv6_dhcp", "dhcp6"), ("ipv6_slaac", "slaac"),
    ]
    assert nd["networks"][0]["netmask"] == "ffff:ffff:ffff:ffff::"
    assert nd["networks"][0]["ip_address"] == "2001:db8::5"
    assert "ip_address" not in nd["networks"][1]
    assert "netmask" not in nd["networks"][3]


def test_routes_with_literal_and_pool_gateways():
    tpl = _static_v4(routes=[
        {"network": "0.0.0.0", "prefix": 0, "gateway": {"fromIPPool": "pool-a"},
         "services": {"dns": ["8.8.8.8"]}},
        {"network": "10.10.0.0", "prefix": 16, "gateway": {"string": "10.0.0.254"}},
        {"network": "10.20.0.0", "prefix": 16},
    ])
    routes = build_network_data(tpl, POOL_A, node().host)["networks"][0]["routes"]
    assert routes == [
        {"network": "0.0.0.0", "netmask": "0.0.0.0", "gateway": "10.0.0.1",
         "services": [{"type": "dns", "address": "8.8.8.8"}]},
        {"network": "10.10.0.0", "netmask": "255.255.0.0", "gateway": "10.0.0.254",
         "services": []},
        {"network": "10.20.0.0", "netmask": "255.255.0.0", "gateway": "", "services": []},
    ]


def test_unresolved_pools_are_errors():
    with pytest.raises(PoolNotResolved, match="pool-a"):
        build_network_data(_static_v4(), AddressCache(), node().host)

    tpl = template(network_data={"networks": {"ipv4DHCP": [{
        "id": "dhcp", "link": "eth0",
        "routes": [{"network": "0.0.0.0", "gateway": {"fromIPPool": "pool-gw"}}],
    }]}})
    with pytest.raises(PoolNotResolved, match="pool-gw"):
        build_network_data(tpl, AddressCache(), node().host)


def test_route_prefix_out_of_range():
    tpl = _static_v4(routes=[{"network": "10.0.0.0", "prefix": 40}])
    with pytest.raises(InvalidPrefixLength):
        build_network_data(tpl, POOL_A, node().host)


def test_links():
    tpl = template(network_data={"links": {
        "ethernets": [
            {"type": "phy", "id": "enp1s0", "macAddress": {"fromHostInterface": "eth0"}},
            {"type": "tap", "id": "tap0", "mtu": 9000, "macAddress": {"string": "aa:bb:cc:dd:ee:ff"}},
            {"id": "nomac"},
        ],
        "bonds": [{
            "id": "bond0", "bondMode": "802.3ad", "bondLinks": ["enp1s0", "tap0"],
            "macAddress": {"fromHostInterface": "eth1"},
        }],
        "vlans": [{"id": "vlan100", "vlanID": 100, "vlanLink": "bond0", "mtu": 1400}],
    }})
    links = build_network_data(tpl, AddressCache(), node().host)["links"]
    assert links == [
        {"type": "phy", "id": "enp1s0", "mtu": 1500, "ethernet_mac_address": "00:00:00:00:00:01"},
        {"type": "tap", "id": "tap0", "mtu": 9000, "ethernet_mac_address": "aa:bb:cc:dd:ee:ff"},
        {"type": "phy", "id": "nomac", "mtu": 1500, "ethernet_mac_address": ""},
        {"type": "bond", "id": "bond0", "mtu": 1500, "ethernet_mac_address": "00:00:00:00:00:02",
         "bond_mode": "802.3ad", "bond_links": ["enp1s0", "tap0"]},
        {"type": "vlan", "id": "vlan100", "mtu": 1400, "vlan_mac_address": "",
         "vlan_id": 100, "vlan_link": "bond0"},
    ]


def test_link_mac_from_unknown_interface():
    tpl = template(network_data={"links": {"ethernets": [
        {"id": "enp1s0", "macAddress": {"fromHostInterface": "eth7"}},
    ]}})
    with pytest.raises(InterfaceNotFound, match="eth7"):
        build_network_data(tpl, AddressCache(), node().host)


def test_top_level_services():
    tpl = template(network_data={"services": {"dns": ["1.1.1.1", "2001:4860:4860::8888"]}})
    nd = build_network_data(tpl, AddressCache(), node().host)
    assert nd["services"] == [
        {"type": "dns", "address": "1.1.1.1"},
        {"type": "dns", "address": "2001:4860:4860::8888"},
    ]


def test_render_twice_is_byte_identical():
    tpl = template(
        meta_data={"indexes": [{"key": "hostname", "prefix": "node-"}]},
        network_data={
            "links": {"ethernets": [{"id": "enp1s0", "macAddress": {"fromHostInterface": "eth0"}}]},
            "networks": {"ipv4": [{"id": "n0", "link": "enp1s0", "ipAddressFromIPPool": "pool-a"}]},
            "services": {"dns": ["8.8.8.8"]},
        },
    )
    first = render(data(index=2), tpl, POOL_A, node())
    second = render(data(index=2), tpl, POOL_A, node())
    assert first.meta_data == second.meta_data
    assert first.network_data == second.network_data

    doc = yaml.safe_load(first.network_data)
    assert list(doc) == ["links", "networks", "services"]
    assert doc["networks"][0]["ip_address"] == "10.0.0.5"


def test_no_network_section_renders_nothing():
    assert render_network_data(template(), POOL_A, node().host) is None
