"""
controller_redirect.models — Immutable values passed through the redirect hook.

Nothing here is mutated after construction.  The redirector either returns the
HttpRequest it was given (same object) or a new one built with copy_with().

Header names are compared case-insensitively, values keep their order.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from controller_redirect.exceptions import ControllerConfigurationError

DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ControllerConfig:
    """Controller endpoint, resolved once at startup.

    port is the raw configured string.  It is only parsed when a redirect is
    attempted (see port_number), so an unconfigured or never-matching process
    keeps running with a bad value.
    """

    hostname: str | None = None
    port: str | None = None

    @property
    def configured(self) -> bool:
        return self.hostname is not None and self.port is not None

    @property
    def port_number(self) -> int:
        """The configured port as an int.

        Raises ControllerConfigurationError if the port is missing or not a
        valid TCP port number.
        """
        try:
            value = int(self.port)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ControllerConfigurationError(name="port", value=self.port) from exc
        if not 0 < value < 65536:
            raise ControllerConfigurationError(name="port", value=self.port)
        return value


# ---------------------------------------------------------------------------
# Credentials and per-call attributes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Credential:
    """Access key id and secret, as resolved by the SDK for one call."""

    access_key_id: str
    secret_value: str = field(repr=False)

    @classmethod
    def from_botocore(cls, credentials: Any) -> Credential | None:
        """Snapshot botocore Credentials / ReadOnlyCredentials.

        Refreshable credentials are frozen first so the key id and secret come
        from the same generation.
        """
        if credentials is None:
            return None
        get_frozen = getattr(credentials, "get_frozen_credentials", None)
        if get_frozen is not None:
            credentials = get_frozen()
        return cls(access_key_id=credentials.access_key, secret_value=credentials.secret_key)


@dataclass(frozen=True)
class AmbientAttributes:
    """Signing context the SDK associates with a single outbound call.

    credential is None for unsigned calls.
    """

    credential: Credential | None = None
    signing_region: str | None = None
    service_signing_name: str | None = None


@dataclass(frozen=True)
class TokenClaims:
    """The claims we look at in a token payload.  Only iss matters."""

    issuer: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> TokenClaims:
        issuer = payload.get("iss")
        return cls(issuer=issuer if isinstance(issuer, str) else None)


# ---------------------------------------------------------------------------
# HTTP request value
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HttpRequest:
    """An outbound HTTP request as plain data.

    headers is an ordered multimap stored as (name, value) pairs.
    """

    method: str
    protocol: str
    host: str
    port: int
    path: str = ""
    query: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_url(
        cls,
        method: str,
        url: str,
        headers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
    ) -> HttpRequest:
        parts = urlsplit(url)
        protocol = parts.scheme or "https"
        port = parts.port or DEFAULT_PORTS.get(protocol, 443)
        if headers is None:
            pairs: tuple[tuple[str, str], ...] = ()
        elif isinstance(headers, Mapping):
            pairs = tuple((str(k), str(v)) for k, v in headers.items())
        else:
            pairs = tuple((str(k), str(v)) for k, v in headers)
        return cls(
            method=method.upper(),
            protocol=protocol,
            host=parts.hostname or "",
            port=port,
            path=parts.path,
            query=parts.query,
            headers=pairs,
        )

    @property
    def netloc(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        if DEFAULT_PORTS.get(self.protocol) == self.port:
            return host
        return f"{host}:{self.port}"

    @property
    def url(self) -> str:
        return urlunsplit((self.protocol, self.netloc, self.path, self.query, ""))

    def header_values(self, name: str) -> list[str]:
        wanted = name.lower()
        return [value for key, value in self.headers if key.lower() == wanted]

    def header(self, name: str) -> str | None:
        values = self.header_values(name)
        return values[0] if values else None

    def header_map(self) -> dict[str, list[str]]:
        result: dict[str, list[str]] = {}
        for key, value in self.headers:
            result.setdefault(key, []).append(value)
        return result

    def copy_with(
        self,
        *,
        host: str | None = None,
        port: int | None = None,
        add_headers: Mapping[str, str] | None = None,
    ) -> HttpRequest:
        """Return a new request with the given overrides applied.

        Each header in add_headers replaces any existing values for that name.
        """
        headers = self.headers
        if add_headers:
            replaced = {name.lower() for name in add_headers}
            headers = tuple(pair for pair in headers if pair[0].lower() not in replaced)
            headers += tuple(add_headers.items())
        return HttpRequest(
            method=self.method,
            protocol=self.protocol,
            host=self.host if host is None else host,
            port=self.port if port is None else port,
            path=self.path,
            query=self.query,
            headers=headers,
        )
