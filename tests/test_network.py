import ipaddress

import pytest

from singtun.network import broadcast_addr, network_from_name, network_name


@pytest.mark.parametrize(
    "number, name",
    [(6, "tcp"), (17, "udp"), (1, "icmpv4"), (58, "icmpv6")],
)
def test_known_names(number, name):
    assert network_name(number) == name
    assert network_from_name(name) == number


def test_unknown_number_is_decimal():
    assert network_name(99) == "99"


def test_round_trip_all_protocols():
    for number in range(256):
        assert network_from_name(network_name(number)) == number


@pytest.mark.parametrize("name", ["256", "abc", "-1", "+5", " 5", ""])
def test_bad_names_give_zero(name):
    assert network_from_name(name) == 0


def test_numeric_name():
    assert network_from_name("255") == 255


def test_network_name_out_of_range():
    with pytest.raises(ValueError):
        network_name(256)


def test_broadcast_addr():
    assert broadcast_addr(["10.0.0.1/24"]) == ipaddress.IPv4Address("10.0.0.255")


def test_broadcast_uses_first_prefix():
    result = broadcast_addr([ipaddress.IPv4Interface("172.19.0.1/30"), "10.0.0.1/8"])
    assert result == ipaddress.IPv4Interface("172.19.0.1/30").network.broadcast_address


def test_broadcast_single_host():
    assert broadcast_addr(["192.0.2.7/32"]) == ipaddress.IPv4Address("192.0.2.7")


def test_broadcast_empty():
    assert broadcast_addr([]) is None


def test_broadcast_rejects_ipv6():
    with pytest.raises(ValueError):
        broadcast_addr(["fd00::1/64"])