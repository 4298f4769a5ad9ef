"""Tests for configuration reading."""

import os
from ipaddress import ip_address
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from realip.configs.config import AppConfig, get_app_config
from realip.configs.system import ProxyConfig


class TestAppConfig:
    def test_static_yaml_defaults(self):
        config = get_app_config()
        assert isinstance(config, AppConfig)
        assert config.api.port == 8000

    def test_env_overrides(self):
        env_vars = {
            "REALIP_PROXY__TRUSTED_PROXIES": '["10.0.0.0/8", "::1"]',
            "REALIP_LOGGING__JSON_OUTPUT": "false",
            "REALIP_API__PORT": "9000",
        }
        with patch.dict(os.environ, env_vars, clear=False):
            config = AppConfig()

        assert config.proxy.trusted_proxies == ["10.0.0.0/8", "::1"]
        assert config.logging.json_output is False
        assert config.api.port == 9000

    def test_invalid_trusted_proxy_rejected(self):
        env_vars = {"REALIP_PROXY__TRUSTED_PROXIES": '["not-a-network"]'}
        with patch.dict(os.environ, env_vars, clear=False):
            with pytest.raises(ValidationError):
                AppConfig()

    def test_not_a_singleton(self):
        assert get_app_config() is not get_app_config()


class TestProxyConfig:
    def test_entries_stripped(self):
        config = ProxyConfig(trusted_proxies=[" 10.0.0.1 "])
        assert config.trusted_proxies == ["10.0.0.1"]

    def test_build_trusted_networks(self):
        trusted = ProxyConfig(
            trusted_proxies=["10.0.0.0/8", "2001:db8::/32"]
        ).build_trusted_networks()
        assert trusted.contains(ip_address("10.9.9.9"))
        assert trusted.contains(ip_address("2001:db8::5"))
        assert not trusted.contains(ip_address("192.168.0.1"))

    def test_default_trusts_nothing(self):
        assert len(ProxyConfig().build_trusted_networks()) == 0
