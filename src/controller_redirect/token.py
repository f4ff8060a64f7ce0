"""
controller_redirect.token — Recognise secrets that are really issued tokens.

A token-shaped secret is header.payload.signature.  Only the payload is
decoded, and only its iss claim is checked.  Nothing here verifies the
signature; the controller re-validates the full token it receives.

None of these functions raise on bad input.  Every failure is a rejection.
"""

from __future__ import annotations

import base64
import binascii
import json

from aws_lambda_powertools import Logger

from controller_redirect.models import TokenClaims

logger = Logger(service="controller-redirect")

TRUSTED_ISSUER = "opsmx"


def split_token(secret: str) -> list[str] | None:
    """Return the three fields of a token-shaped secret, or None."""
    fields = secret.split(".")
    if len(fields) != 3 or not all(fields):
        return None
    return fields


def decode_claims(payload: str) -> TokenClaims | None:
    """Decode a base64 JSON payload into TokenClaims.

    Tokens are issued without "=" padding, so it is restored before decoding.
    Characters outside the standard base64 alphabet are rejected.
    """
    try:
        raw = base64.b64decode(payload + "=" * (-len(payload) % 4), validate=True)
    except (binascii.Error, ValueError):
        logger.debug("Token payload base64 decode error")
        return None
    try:
        document = json.loads(raw.decode("utf-8"))
    except (ValueError, RecursionError):
        logger.debug("Token payload json parse error")
        return None
    if not isinstance(document, dict):
        logger.debug("Token payload is not a JSON object")
        return None
    return TokenClaims.from_payload(document)


def is_trusted_token(secret: str, issuer: str = TRUSTED_ISSUER) -> bool:
    fields = split_token(secret)
    if fields is None:
        logger.debug("Not a token")
        return False
    claims = decode_claims(fields[1])
    if claims is None:
        return False
    if claims.issuer != issuer:
        logger.debug("Token not issued by trusted issuer", issuer=claims.issuer)
        return False
    return True
