"""
controller_redirect.redirector — Send token-authenticated calls to the controller.

When the secret access key of a call is a token issued by opsmx, the request is
rewritten to the controller endpoint.  The original destination and signing
context travel in x-opsmx-* headers so the controller can re-validate the
token and proxy the call.

Checks run in a fixed order and the first failing check returns the request
object it was given, untouched:

  1. controller not configured
  2. no credential for the call
  3. secret is not header.payload.signature
  4. payload is not base64
  5. payload is not JSON, or iss is missing or not "opsmx"

None of these raise.  A redirect with a non-numeric configured port raises
ControllerConfigurationError.
"""

from __future__ import annotations

from typing import Protocol

from aws_lambda_powertools import Logger

from controller_redirect.config import load_controller_config
from controller_redirect.exceptions import ControllerConfigurationError
from controller_redirect.models import AmbientAttributes, ControllerConfig, HttpRequest
from controller_redirect.token import TRUSTED_ISSUER, decode_claims, split_token

logger = Logger(service="controller-redirect")

HEADER_ORIGINAL_HOST = "x-opsmx-original-host"
HEADER_ORIGINAL_PORT = "x-opsmx-original-port"
HEADER_SIGNING_REGION = "x-opsmx-signing-region"
HEADER_SERVICE_SIGNING_NAME = "x-opsmx-service-signing-name"
HEADER_TOKEN = "x-opsmx-token"


class RequestModifier(Protocol):
    def modify(self, request: HttpRequest, ambient: AmbientAttributes) -> HttpRequest: ...


class RequestRedirector:
    """
    Stateless per-call redirect policy with read-only configuration.

    Safe to share between threads: nothing is written after __init__.
    """

    def __init__(self, config: ControllerConfig | None = None) -> None:
        self._config = config if config is not None else load_controller_config()
        logger.info(
            "Loaded request redirector",
            hostname=self._config.hostname,
            port=self._config.port,
        )
        if not self._config.configured:
            logger.info("Request redirector not configured")
        else:
            try:
                _ = self._config.port_number
            except ControllerConfigurationError:
                logger.warning(
                    "Controller port is not a valid port number", port=self._config.port
                )

    @property
    def config(self) -> ControllerConfig:
        return self._config

    @property
    def configured(self) -> bool:
        return self._config.configured

    def modify(self, request: HttpRequest, ambient: AmbientAttributes) -> HttpRequest:
        if not self._config.configured:
            return request

        credential = ambient.credential
        if credential is None:
            logger.debug("No credentials")
            return request

        # If it doesn't look like a token, make no modifications.
        fields = split_token(credential.secret_value)
        if fields is None:
            logger.debug("Not a token")
            return request

        # If it isn't issued by us, make no modifications.
        claims = decode_claims(fields[1])
        if claims is None or claims.issuer != TRUSTED_ISSUER:
            logger.debug("Not a token issued by opsmx")
            return request

        port = self._config.port_number
        signing_region = ambient.signing_region
        logger.debug(
            "Redirecting request to controller",
            original_host=request.host,
            original_port=request.port,
            controller_host=self._config.hostname,
            controller_port=port,
        )
        return request.copy_with(
            host=self._config.hostname,
            port=port,
            add_headers={
                HEADER_ORIGINAL_HOST: request.host,
                HEADER_ORIGINAL_PORT: str(request.port),
                HEADER_SIGNING_REGION: "null" if signing_region is None else str(signing_region),
                HEADER_SERVICE_SIGNING_NAME: ambient.service_signing_name or "",
                HEADER_TOKEN: credential.secret_value,
            },
        )
