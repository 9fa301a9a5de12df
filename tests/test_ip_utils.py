"""Tests for subnet arithmetic."""

import random

import pytest

from netconfig_analyzer.utils.ip_utils import (
    INVALID,
    SUBNET_TOO_SMALL,
    int_to_ip,
    ip_to_int,
    mask_to_prefix,
    parse_mask_or_prefix,
    prefix_to_mask,
    subnet_info,
    validate_ip,
)


def test_subnet_info_for_slash_24() -> None:
    info = subnet_info("10.1.10.1", "255.255.255.0")

    assert info.valid
    assert info.network == "10.1.10.0"
    assert info.broadcast == "10.1.10.255"
    assert info.usable_range == "10.1.10.1 - 10.1.10.254"
    assert info.prefix_length == 24
    assert info.total_addresses == 256
    assert info.usable_addresses == 254


def test_network_and_broadcast_bound_the_address() -> None:
    rng = random.Random(1234)
    for _ in range(500):
        address = int_to_ip(rng.getrandbits(32))
        prefix = rng.randint(0, 32)

        info = subnet_info(address, prefix)

        assert ip_to_int(info.network) <= ip_to_int(address) <= ip_to_int(info.broadcast)


@pytest.mark.parametrize("prefix", range(0, 33))
def test_usable_count_law(prefix: int) -> None:
    info = subnet_info("172.16.5.77", prefix)

    if prefix < 31:
        expected = max(0, 2 ** (32 - prefix) - 2)
    elif prefix == 31:
        expected = 2
    else:
        expected = 1
    assert info.usable_addresses == expected
    assert info.total_addresses == 2 ** (32 - prefix)


def test_point_to_point_slash_31() -> None:
    info = subnet_info("192.168.1.1", "255.255.255.254")

    assert info.prefix_length == 31
    assert info.usable_addresses == 2
    assert info.usable_range == "192.168.1.0 - 192.168.1.1"


def test_host_route_slash_32() -> None:
    info = subnet_info("10.0.0.5", "255.255.255.255")

    assert info.usable_addresses == 1
    assert info.usable_range == "10.0.0.5"
    assert info.network == "10.0.0.5"
    assert info.broadcast == "10.0.0.5"


def test_slash_zero_does_not_overflow() -> None:
    info = subnet_info("10.1.2.3", 0)

    assert info.network == "0.0.0.0"
    assert info.broadcast == "255.255.255.255"
    assert info.subnet_mask == "0.0.0.0"
    assert info.total_addresses == 2 ** 32
    assert info.usable_addresses == 2 ** 32 - 2


def test_prefix_string_forms_are_equivalent() -> None:
    dotted = subnet_info("10.20.30.40", "255.255.252.0")

    assert subnet_info("10.20.30.40", "22") == dotted
    assert subnet_info("10.20.30.40", "/22") == dotted
    assert subnet_info("10.20.30.40", 22) == dotted
    assert dotted.network == "10.20.28.0"


@pytest.mark.parametrize("mask", ["255.0.255.0", "255.255.255.256", "garbage", "/33", "", None])
def test_invalid_mask_yields_sentinel(mask) -> None:
    info = subnet_info("10.0.0.1", mask)

    assert not info.valid
    assert info.network == INVALID
    assert info.broadcast == INVALID
    assert info.usable_range == INVALID
    assert info.usable_addresses == 0
    assert info.total_addresses == 0


@pytest.mark.parametrize("address", ["10.0.0", "256.1.1.1", "dhcp", "", "1.2.3.4.5"])
def test_invalid_address_yields_sentinel(address: str) -> None:
    info = subnet_info(address, 24)

    assert not info.valid
    assert info.error == "invalid IPv4 address"
    assert info.network == INVALID


def test_mask_helpers() -> None:
    assert mask_to_prefix("255.255.255.0") == 24
    assert mask_to_prefix("0.0.0.0") == 0
    assert mask_to_prefix("255.255.0.255") is None
    assert prefix_to_mask(20) == "255.255.240.0"
    assert prefix_to_mask(0) == "0.0.0.0"
    assert parse_mask_or_prefix("/8") == 8
    assert parse_mask_or_prefix(True) is None
    with pytest.raises(ValueError):
        prefix_to_mask(33)


def test_address_packing_round_trip() -> None:
    assert ip_to_int("192.168.1.10") == 0xC0A8010A
    assert int_to_ip(0xC0A8010A) == "192.168.1.10"
    assert validate_ip("192.168.1.10")
    assert not validate_ip("192.168.1")


def test_slash_30_has_two_usable_hosts() -> None:
    info = subnet_info("10.255.0.1", "255.255.255.252")

    assert info.usable_addresses == 2
    assert info.usable_range == "10.255.0.1 - 10.255.0.2"
    assert SUBNET_TOO_SMALL not in info.usable_range
