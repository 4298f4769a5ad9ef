"""Tests for trust-chain resolution."""

from ipaddress import ip_address

import pytest

from realip.core.resolver import real_ip, resolve_client_ip
from realip.core.trust import TrustedNetworks

PEER = "1.2.3.4"


def _trust(*entries: str) -> TrustedNetworks:
    return TrustedNetworks.parse(entries)


# =========================================================================
# End-to-end scenarios (peer 1.2.3.4)
# =========================================================================


class TestRealIPScenarios:
    def test_no_trust_no_headers(self):
        assert real_ip({}, PEER, _trust()) == ip_address("1.2.3.4")

    def test_untrusted_peer_ignores_header(self):
        headers = {"x-forwarded-for": "10.10.10.10"}
        assert real_ip(headers, PEER, _trust()) == ip_address("1.2.3.4")

    def test_trusted_peer_uses_header(self):
        headers = {"x-forwarded-for": "10.10.10.10"}
        assert real_ip(headers, PEER, _trust(PEER)) == ip_address("10.10.10.10")

    def test_nested_stops_at_first_untrusted(self):
        headers = {"x-forwarded-for": "10.10.10.10, 11.11.11.11"}
        assert real_ip(headers, PEER, _trust(PEER)) == ip_address("11.11.11.11")

    def test_nested_with_trusted_outer_hop(self):
        headers = {"x-forwarded-for": "10.10.10.10, 11.11.11.11"}
        assert real_ip(headers, PEER, _trust(PEER, "10.10.10.10")) == ip_address(
            "11.11.11.11"
        )

    def test_trusted_forwarded(self):
        headers = {"forwarded": "for=10.10.10.10"}
        assert real_ip(headers, PEER, _trust(PEER)) == ip_address("10.10.10.10")

    def test_trusted_forwarded_without_for(self):
        headers = {"forwarded": "by=11.11.11.11"}
        assert real_ip(headers, PEER, _trust(PEER)) == ip_address("1.2.3.4")


# =========================================================================
# Chain walk
# =========================================================================


class TestResolveClientIP:
    def test_no_peer(self):
        assert resolve_client_ip(None, [ip_address("10.0.0.1")], _trust()) is None

    @pytest.mark.parametrize(
        "hops",
        [[], ["10.10.10.10"], ["6.6.6.6", "10.10.10.10", "1.2.3.4"]],
    )
    def test_untrusted_peer_never_overridden(self, hops):
        hops = [ip_address(h) for h in hops]
        assert resolve_client_ip(ip_address(PEER), hops, _trust("10.0.0.0/8")) == (
            ip_address(PEER)
        )

    def test_all_trusted_returns_furthest_hop(self):
        hops = [ip_address("10.0.0.1"), ip_address("10.0.0.2")]
        peer = ip_address("10.0.0.3")
        assert resolve_client_ip(peer, hops, _trust("10.0.0.0/8")) == ip_address(
            "10.0.0.1"
        )

    def test_all_trusted_without_hops_returns_peer(self):
        peer = ip_address(PEER)
        assert resolve_client_ip(peer, [], _trust(PEER)) == peer

    def test_spoofed_prefix_not_reached(self):
        hops = [ip_address("6.6.6.6"), ip_address("8.8.8.8"), ip_address("10.0.0.3")]
        peer = ip_address("10.0.0.5")
        assert resolve_client_ip(peer, hops, _trust("10.0.0.0/8")) == ip_address(
            "8.8.8.8"
        )


# =========================================================================
# Peer forms
# =========================================================================


class TestPeerForms:
    def test_socket_pair(self):
        headers = {"x-real-ip": "5.6.7.8"}
        assert real_ip(headers, (PEER, 443), _trust(PEER)) == ip_address("5.6.7.8")

    def test_address_object(self):
        assert real_ip({}, ip_address(PEER), _trust()) == ip_address(PEER)

    def test_ipv6_peer(self):
        headers = {"x-forwarded-for": "[2001:db8::1]"}
        assert real_ip(headers, ("::1", 80), _trust("::1")) == ip_address(
            "2001:db8::1"
        )

    def test_missing_peer(self):
        assert real_ip({"x-real-ip": "5.6.7.8"}, None, _trust()) is None

    def test_non_ip_peer_counts_as_missing(self):
        assert real_ip({}, ("testclient", 50000), _trust()) is None
