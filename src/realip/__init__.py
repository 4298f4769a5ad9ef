"""Resolve the real client IP of requests behind reverse proxies."""

from .core import TrustedNetworks, extract_hops, real_ip, resolve_client_ip

__all__ = ["TrustedNetworks", "extract_hops", "real_ip", "resolve_client_ip"]
