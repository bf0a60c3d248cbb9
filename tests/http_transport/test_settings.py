"""Tests for the configuration snapshot and per-key resolvers."""

import pytest
from pydantic import ValidationError

from LFSKit.HTTPTransport.env import MappingEnvironment
from LFSKit.HTTPTransport.settings import (
    ClientSettings,
    read_int_setting,
    resolve_skip_prompt,
    resolve_skip_ssl_verify,
)


class TestSkipSSLVerify:
    """Either source can disable verification; neither can force it back on."""

    @pytest.mark.parametrize(
        "git_values,os_values,expected",
        [
            ({}, {}, False),
            ({"http.sslverify": "false"}, {}, True),
            ({}, {"GIT_SSL_NO_VERIFY": "1"}, True),
            ({"http.sslverify": "true"}, {"GIT_SSL_NO_VERIFY": "true"}, True),
            ({"http.sslverify": "false"}, {"GIT_SSL_NO_VERIFY": "false"}, True),
            ({"http.sslverify": "true"}, {"GIT_SSL_NO_VERIFY": "false"}, False),
            ({"http.sslverify": "bogus"}, {}, True),
        ],
    )
    def test_combinations(self, git_values, os_values, expected):
        assert (
            resolve_skip_ssl_verify(MappingEnvironment(os_values), MappingEnvironment(git_values))
            is expected
        )


class TestSkipPrompt:
    def test_prompting_allowed_by_default(self):
        assert resolve_skip_prompt(MappingEnvironment()) is False

    def test_terminal_prompt_disabled(self):
        assert resolve_skip_prompt(MappingEnvironment({"GIT_TERMINAL_PROMPT": "0"})) is True


class TestClientSettings:
    """Snapshot contents and deferred defaults."""

    def test_snapshot_reads_integer_keys(self):
        git_env = MappingEnvironment(
            {
                "lfs.dialtimeout": "5",
                "lfs.keepalive": "60",
                "lfs.tlstimeout": "7",
                "lfs.concurrenttransfers": "8",
            }
        )
        settings = ClientSettings.from_environments(MappingEnvironment(), git_env)
        assert settings.dial_timeout == 5
        assert settings.keepalive_timeout == 60
        assert settings.tls_timeout == 7
        assert settings.concurrent_transfers == 8

    def test_unset_values_stay_zero_until_construction(self):
        settings = ClientSettings.from_environments(
            MappingEnvironment(), MappingEnvironment({"lfs.dialtimeout": "soon"})
        )
        assert settings.dial_timeout == 0
        assert settings.effective_dial_timeout == 30
        assert settings.effective_keepalive_timeout == 1800
        assert settings.effective_tls_timeout == 30
        assert settings.effective_concurrent_transfers == 3

    def test_non_positive_values_use_defaults(self):
        settings = ClientSettings(dial_timeout=-5, concurrent_transfers=0, tls_timeout=1)
        assert settings.effective_dial_timeout == 30
        assert settings.effective_concurrent_transfers == 3
        assert settings.effective_tls_timeout == 1

    def test_snapshot_carries_proxies(self):
        settings = ClientSettings.from_environments(
            MappingEnvironment({"NO_PROXY": "internal"}),
            MappingEnvironment({"http.proxy": "https://proxy.example"}),
        )
        assert settings.proxies.https_proxy == "https://proxy.example"
        assert settings.proxies.no_proxy == "internal"

    def test_snapshot_is_immutable(self):
        settings = ClientSettings()
        with pytest.raises(ValidationError):
            settings.dial_timeout = 10

    def test_read_int_setting_defaults_to_zero(self):
        assert read_int_setting(MappingEnvironment(), "lfs.keepalive") == 0
