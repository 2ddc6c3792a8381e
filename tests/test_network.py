"""Tests for the network membership classifier."""

import pytest

from intent import is_in_network

# ── classful IPv4 ────────────────────────────────────────────────────


class TestClassfulIPv4:
    def test_ip_in_network(self):
        assert is_in_network("192.168.1.10", "192.168.1.0") is True

    def test_ip_in_neighbouring_class_c(self):
        assert is_in_network("192.168.2.10", "192.168.1.0") is False

    def test_network_address_is_member(self):
        assert is_in_network("192.168.1.0", "192.168.1.0") is True

    def test_broadcast_address_is_member(self):
        assert is_in_network("192.168.1.255", "192.168.1.0") is True

    @pytest.mark.parametrize(
        "ip, network, expected",
        [
            ("10.200.3.4", "10.0.0.0", True),
            ("10.255.255.255", "10.0.0.0", True),
            ("11.0.0.0", "10.0.0.0", False),
            ("172.16.99.1", "172.16.0.0", True),
            ("172.16.255.255", "172.16.0.0", True),
            ("172.17.0.0", "172.16.0.0", False),
            ("203.0.113.77", "203.0.113.0", True),
            ("203.0.114.0", "203.0.113.0", False),
        ],
    )
    def test_class_boundaries(self, ip, network, expected):
        assert is_in_network(ip, network) is expected

    def test_host_bits_in_network_are_ignored(self):
        assert is_in_network("192.168.1.10", "192.168.1.77") is True


# ── explicit prefix ──────────────────────────────────────────────────


class TestExplicitPrefix:
    def test_prefix_narrower_than_class(self):
        assert is_in_network("10.1.2.3", "10.1.0.0/16") is True
        assert is_in_network("10.2.0.1", "10.1.0.0/16") is False

    def test_prefix_wider_than_class(self):
        assert is_in_network("192.168.7.1", "192.168.0.0/16") is True

    def test_ipv6_prefix(self):
        assert is_in_network("2001:db8:1::5", "2001:db8::/32") is True


# ── IPv6 default ─────────────────────────────────────────────────────


class TestIPv6:
    def test_same_64(self):
        assert is_in_network("2001:db8::1", "2001:db8::") is True

    def test_other_64(self):
        assert is_in_network("2001:db8:0:1::1", "2001:db8::") is False


# ── fail closed ──────────────────────────────────────────────────────


class TestFailClosed:
    @pytest.mark.parametrize(
        "ip, network",
        [
            ("not.an.ip", "192.168.1.0"),
            ("192.168.1.10", "not.a.network"),
            ("", "192.168.1.0"),
            ("192.168.1.10", ""),
            ("192.168.1.300", "192.168.1.0"),
            ("192.168.1.10", "192.168.1.0/33"),
        ],
    )
    def test_unparsable_input(self, ip, network):
        assert is_in_network(ip, network) is False

    def test_ipv6_in_ipv4_network(self):
        assert is_in_network("2001:db8::1", "192.168.1.0") is False

    def test_ipv4_in_ipv6_network(self):
        assert is_in_network("192.168.1.10", "2001:db8::") is False

    def test_non_string_input(self):
        assert is_in_network(None, "192.168.1.0") is False
