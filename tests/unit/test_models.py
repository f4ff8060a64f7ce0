"""
tests/unit/test_models.py — Value semantics of controller_redirect.models.

Validates:
- HttpRequest URL parsing and rendering, default ports
- Header multimap lookups are case-insensitive and keep order
- copy_with() never touches the original value
- ControllerConfig.configured and port parsing
- Credential snapshots from botocore credential objects
"""

import dataclasses

import pytest
from botocore.credentials import Credentials, ReadOnlyCredentials
from controller_redirect.exceptions import ControllerConfigurationError
from controller_redirect.models import (
    AmbientAttributes,
    ControllerConfig,
    Credential,
    HttpRequest,
    TokenClaims,
)

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def request_value() -> HttpRequest:
    return HttpRequest(
        method="GET",
        protocol="https",
        host="original-host.example.com",
        port=1234,
        path="/bucket/key",
        query="versionId=1",
        headers=(("X-Amz-Date", "20240101T000000Z"), ("x-custom", "a"), ("X-Custom", "b")),
    )


# ---------------------------------------------------------------------------
# HttpRequest
# ---------------------------------------------------------------------------


class TestHttpRequestFromUrl:
    def test_explicit_port(self):
        req = HttpRequest.from_url("get", "https://original-host.example.com:1234/a?b=c")
        assert req.method == "GET"
        assert req.protocol == "https"
        assert req.host == "original-host.example.com"
        assert req.port == 1234
        assert req.path == "/a"
        assert req.query == "b=c"
        assert req.headers == ()

    def test_https_default_port(self):
        assert HttpRequest.from_url("GET", "https://s3.amazonaws.com/").port == 443

    def test_http_default_port(self):
        assert HttpRequest.from_url("GET", "http://localhost/").port == 80

    def test_headers_from_mapping(self):
        req = HttpRequest.from_url("PUT", "https://h/", {"Content-Type": "text/plain"})
        assert req.headers == (("Content-Type", "text/plain"),)

    def test_headers_from_pairs_keep_duplicates(self):
        req = HttpRequest.from_url("PUT", "https://h/", [("a", "1"), ("a", "2")])
        assert req.header_values("a") == ["1", "2"]


class TestHttpRequestUrl:
    def test_non_default_port_rendered(self, request_value: HttpRequest):
        assert request_value.url == "https://original-host.example.com:1234/bucket/key?versionId=1"

    def test_default_port_omitted(self):
        req = HttpRequest(
            method="GET", protocol="https", host="s3.amazonaws.com", port=443, path="/"
        )
        assert req.url == "https://s3.amazonaws.com/"

    def test_ipv6_host_bracketed(self):
        req = HttpRequest(method="GET", protocol="http", host="::1", port=8080)
        assert req.netloc == "[::1]:8080"


class TestHttpRequestHeaders:
    def test_header_values_case_insensitive(self, request_value: HttpRequest):
        assert request_value.header_values("X-CUSTOM") == ["a", "b"]

    def test_header_first_value(self, request_value: HttpRequest):
        assert request_value.header("x-amz-date") == "20240101T000000Z"

    def test_header_missing(self, request_value: HttpRequest):
        assert request_value.header("nope") is None
        assert request_value.header_values("nope") == []

    def test_header_map_groups_by_exact_name(self, request_value: HttpRequest):
        assert request_value.header_map() == {
            "X-Amz-Date": ["20240101T000000Z"],
            "x-custom": ["a"],
            "X-Custom": ["b"],
        }


class TestHttpRequestCopyWith:
    def test_returns_new_value(self, request_value: HttpRequest):
        copy = request_value.copy_with(host="controller.example.com", port=9876)
        assert copy is not request_value
        assert copy.host == "controller.example.com"
        assert copy.port == 9876
        assert copy.path == request_value.path
        assert copy.query == request_value.query
        assert copy.method == request_value.method
        assert copy.headers == request_value.headers

    def test_original_untouched(self, request_value: HttpRequest):
        before = dataclasses.replace(request_value)
        request_value.copy_with(host="other", port=1, add_headers={"x-new": "v"})
        assert request_value == before

    def test_no_overrides_is_equal(self, request_value: HttpRequest):
        assert request_value.copy_with() == request_value

    def test_added_headers_appended(self, request_value: HttpRequest):
        copy = request_value.copy_with(add_headers={"x-new": "v"})
        assert copy.headers[-1] == ("x-new", "v")
        assert copy.header("X-Amz-Date") == "20240101T000000Z"

    def test_added_header_replaces_existing_values(self, request_value: HttpRequest):
        copy = request_value.copy_with(add_headers={"x-custom": "c"})
        assert copy.header_values("x-custom") == ["c"]

    def test_frozen(self, request_value: HttpRequest):
        with pytest.raises(dataclasses.FrozenInstanceError):
            request_value.host = "elsewhere"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# ControllerConfig
# ---------------------------------------------------------------------------


class TestControllerConfig:
    def test_configured_requires_both(self):
        assert ControllerConfig("controller.example.com", "9876").configured
        assert not ControllerConfig("controller.example.com", None).configured
        assert not ControllerConfig(None, "9876").configured
        assert not ControllerConfig().configured

    def test_port_number(self):
        assert ControllerConfig("h", "9876").port_number == 9876

    @pytest.mark.parametrize("port", ["abc", "", "98.76", "0", "70000", None])
    def test_bad_port_raises(self, port):
        with pytest.raises(ControllerConfigurationError) as exc_info:
            ControllerConfig("h", port).port_number
        assert exc_info.value.name == "port"
        assert exc_info.value.value == port

    def test_error_is_value_error(self):
        exc = ControllerConfigurationError(name="port", value="abc")
        assert isinstance(exc, ValueError)
        assert "'abc'" in str(exc)


# ---------------------------------------------------------------------------
# Credential / AmbientAttributes / TokenClaims
# ---------------------------------------------------------------------------


class TestCredential:
    def test_from_none(self):
        assert Credential.from_botocore(None) is None

    def test_from_botocore_credentials(self):
        cred = Credential.from_botocore(Credentials("accessKey", "secretKey", "session"))
        assert cred == Credential(access_key_id="accessKey", secret_value="secretKey")

    def test_from_read_only_credentials(self):
        cred = Credential.from_botocore(ReadOnlyCredentials("accessKey", "secretKey", None))
        assert cred == Credential(access_key_id="accessKey", secret_value="secretKey")

    def test_secret_not_in_repr(self):
        assert "secretKey" not in repr(Credential("accessKey", "secretKey"))


class TestAmbientAttributes:
    def test_defaults_are_absent(self):
        ambient = AmbientAttributes()
        assert ambient.credential is None
        assert ambient.signing_region is None
        assert ambient.service_signing_name is None


class TestTokenClaims:
    def test_issuer(self):
        assert TokenClaims.from_payload({"iss": "opsmx", "sub": "x"}).issuer == "opsmx"

    def test_missing_issuer(self):
        assert TokenClaims.from_payload({"sub": "x"}).issuer is None

    def test_non_string_issuer(self):
        assert TokenClaims.from_payload({"iss": 42}).issuer is None
