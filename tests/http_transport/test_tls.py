"""Tests for per-host TLS verification policy."""

import logging
import ssl
from pathlib import Path

import certifi
import pytest

from LFSKit.HTTPTransport.env import MappingEnvironment
from LFSKit.HTTPTransport.tls import (
    TLSPolicy,
    create_ssl_context,
    get_root_cas_for_host,
    is_cert_verification_disabled_for_host,
    resolve_tls_policy,
)

HOST = "git.example.com"


class TestVerificationOverride:
    """Host-scoped ``sslverify`` wins over the global flag in both directions."""

    def test_global_flag_applies_without_override(self):
        env = MappingEnvironment()
        assert is_cert_verification_disabled_for_host(HOST, skip_ssl_verify=True, git_env=env)
        assert not is_cert_verification_disabled_for_host(HOST, skip_ssl_verify=False, git_env=env)

    def test_host_override_enables_verification(self):
        env = MappingEnvironment({f"http.https://{HOST}/.sslverify": "true"})
        assert not is_cert_verification_disabled_for_host(HOST, skip_ssl_verify=True, git_env=env)

    def test_host_override_disables_verification(self):
        env = MappingEnvironment({f"http.https://{HOST}/.sslverify": "false"})
        assert is_cert_verification_disabled_for_host(HOST, skip_ssl_verify=False, git_env=env)
        assert not is_cert_verification_disabled_for_host(
            "other.example.com", skip_ssl_verify=False, git_env=env
        )

    def test_empty_override_defers_to_global_flag(self):
        env = MappingEnvironment({f"http.https://{HOST}/.sslverify": ""})
        assert is_cert_verification_disabled_for_host(HOST, skip_ssl_verify=True, git_env=env)


class TestRootCAs:
    """CA material lookup order."""

    def test_no_configuration_means_system_roots(self):
        tls_policy = get_root_cas_for_host(
            HOST, git_env=MappingEnvironment(), os_env=MappingEnvironment()
        )
        assert tls_policy == TLSPolicy(verify=True)
        assert not tls_policy.has_custom_roots

    def test_host_cainfo_beats_global_settings(self):
        git_env = MappingEnvironment(
            {f"http.https://{HOST}/.sslcainfo": "/host.pem", "http.sslcainfo": "/global.pem"}
        )
        os_env = MappingEnvironment({"GIT_SSL_CAINFO": "/env.pem"})
        assert get_root_cas_for_host(HOST, git_env=git_env, os_env=os_env).ca_file == "/host.pem"

    def test_global_cainfo_beats_environment(self):
        git_env = MappingEnvironment({"http.sslcainfo": "/global.pem"})
        os_env = MappingEnvironment({"GIT_SSL_CAINFO": "/env.pem"})
        assert get_root_cas_for_host(HOST, git_env=git_env, os_env=os_env).ca_file == "/global.pem"

    def test_environment_cainfo_and_capath(self):
        os_env = MappingEnvironment({"GIT_SSL_CAINFO": "/env.pem", "GIT_SSL_CAPATH": "/certs"})
        tls_policy = get_root_cas_for_host(HOST, git_env=MappingEnvironment(), os_env=os_env)
        assert tls_policy.ca_file == "/env.pem"
        assert tls_policy.ca_path == "/certs"
        assert tls_policy.has_custom_roots

    def test_git_capath_beats_environment(self):
        git_env = MappingEnvironment({"http.sslcapath": "/git-certs"})
        os_env = MappingEnvironment({"GIT_SSL_CAPATH": "/env-certs"})
        assert get_root_cas_for_host(HOST, git_env=git_env, os_env=os_env).ca_path == "/git-certs"


class TestResolveTLSPolicy:
    """Exactly one branch applies per host."""

    def test_disabled_policy_ignores_ca_configuration(self):
        git_env = MappingEnvironment({"http.sslcainfo": "/global.pem"})
        tls_policy = resolve_tls_policy(
            HOST, skip_ssl_verify=True, git_env=git_env, os_env=MappingEnvironment()
        )
        assert tls_policy == TLSPolicy(verify=False)

    def test_enabled_policy_carries_ca_configuration(self):
        git_env = MappingEnvironment({"http.sslcainfo": "/global.pem"})
        tls_policy = resolve_tls_policy(
            HOST, skip_ssl_verify=False, git_env=git_env, os_env=MappingEnvironment()
        )
        assert tls_policy.verify is True
        assert tls_policy.ca_file == "/global.pem"


class TestCreateSSLContext:
    """SSL context construction for each policy."""

    def test_insecure_context(self, caplog):
        with caplog.at_level(logging.WARNING, logger="LFSKit.HTTPTransport.tls"):
            ctx = create_ssl_context(TLSPolicy(verify=False), HOST)
        assert ctx.verify_mode == ssl.CERT_NONE
        assert ctx.check_hostname is False
        assert any("disabled" in record.getMessage() for record in caplog.records)

    def test_default_context_verifies(self):
        ctx = create_ssl_context(TLSPolicy())
        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.check_hostname is True

    def test_custom_ca_file_is_loaded(self):
        ctx = create_ssl_context(TLSPolicy(ca_file=certifi.where()), HOST)
        assert ctx.verify_mode == ssl.CERT_REQUIRED

    def test_default_context_uses_certifi_roots(self):
        ctx = create_ssl_context(TLSPolicy())
        assert len(ctx.get_ca_certs()) > 1

    def test_configured_ca_file_replaces_default_roots(self, tmp_path):
        marker = "-----END CERTIFICATE-----"
        bundle = Path(certifi.where()).read_text(encoding="utf-8")
        first_cert = bundle[bundle.index("-----BEGIN CERTIFICATE-----") : bundle.index(marker)]
        ca_file = tmp_path / "private-ca.pem"
        ca_file.write_text(first_cert + marker + "\n")

        ctx = create_ssl_context(TLSPolicy(ca_file=str(ca_file)), HOST)

        assert len(ctx.get_ca_certs()) == 1
        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.check_hostname is True

    def test_missing_ca_file_is_logged_and_skipped(self, tmp_path, caplog):
        missing = tmp_path / "missing.pem"
        with caplog.at_level(logging.WARNING, logger="LFSKit.HTTPTransport.tls"):
            ctx = create_ssl_context(TLSPolicy(ca_file=str(missing)), HOST)
        assert ctx.verify_mode == ssl.CERT_REQUIRED
        assert ctx.get_ca_certs() == []
        assert any(str(missing) in record.getMessage() for record in caplog.records)

    @pytest.mark.parametrize("verify", [True, False])
    def test_returns_ssl_context(self, verify):
        assert isinstance(create_ssl_context(TLSPolicy(verify=verify)), ssl.SSLContext)
