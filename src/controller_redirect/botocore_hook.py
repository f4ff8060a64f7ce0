"""
controller_redirect.botocore_hook — Install the redirector into boto3/botocore.

botocore emits before-sign.<service>.<operation> once per HTTP attempt with the
mutable AWSRequest, the signing name, the region and the RequestSigner holding
the resolved credentials.  The handler here turns those into an HttpRequest and
AmbientAttributes, asks the redirector, and writes a redirect back onto the
AWSRequest before botocore signs it.

Usage:

    session = boto3.Session()
    register(session)           # before creating clients from the session
    s3 = session.client("s3")

or, for an existing client:

    register(boto3.client("s3"))
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit, urlunsplit

from aws_lambda_powertools import Logger

from controller_redirect.models import AmbientAttributes, Credential, HttpRequest
from controller_redirect.redirector import RequestModifier, RequestRedirector

logger = Logger(service="controller-redirect")

EVENT_NAME = "before-sign"
UNIQUE_ID = "controller-redirect"


# ---------------------------------------------------------------------------
# AWSRequest <-> HttpRequest
# ---------------------------------------------------------------------------


def _header_text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def request_from_botocore(aws_request: Any) -> HttpRequest:
    return HttpRequest.from_url(
        aws_request.method or "GET",
        aws_request.url,
        [(name, _header_text(value)) for name, value in aws_request.headers.items()],
    )


def apply_to_botocore(aws_request: Any, original: HttpRequest, modified: HttpRequest) -> None:
    """Copy the differences between original and modified onto aws_request.

    Path, query and fragment of the URL are kept as botocore built them.
    """
    if (modified.protocol, modified.netloc) != (original.protocol, original.netloc):
        parts = urlsplit(aws_request.url)
        aws_request.url = urlunsplit(
            (modified.protocol, modified.netloc, parts.path, parts.query, parts.fragment)
        )
    for name, values in modified.header_map().items():
        if original.header_values(name) == values:
            continue
        del aws_request.headers[name]
        for value in values:
            aws_request.headers[name] = value


def ambient_from_event(
    signing_name: str | None = None,
    region_name: str | None = None,
    request_signer: Any = None,
    **kwargs: Any,
) -> AmbientAttributes:
    """Build AmbientAttributes from before-sign event keyword arguments.

    Unsigned clients have no credentials on their signer, which gives an
    AmbientAttributes without a credential.
    """
    credentials = getattr(request_signer, "_credentials", None)
    if region_name is None:
        region_name = getattr(request_signer, "region_name", None)
    if signing_name is None:
        signing_name = getattr(request_signer, "signing_name", None)
    return AmbientAttributes(
        credential=Credential.from_botocore(credentials),
        signing_region=region_name,
        service_signing_name=signing_name,
    )


# ---------------------------------------------------------------------------
# Event handler
# ---------------------------------------------------------------------------


class RedirectHandler:
    """before-sign handler delegating the decision to a RequestModifier."""

    def __init__(self, modifier: RequestModifier) -> None:
        self.modifier = modifier

    def __call__(self, request: Any, **kwargs: Any) -> None:
        original = request_from_botocore(request)
        modified = self.modifier.modify(original, ambient_from_event(**kwargs))
        if modified is original:
            return
        apply_to_botocore(request, original, modified)
        logger.debug(
            "Request redirected",
            operation_name=kwargs.get("operation_name"),
            host=modified.host,
            port=modified.port,
        )


def _event_emitter(target: Any) -> Any:
    meta = getattr(target, "meta", None)
    if meta is not None:
        # boto3 resources keep their client on meta.
        client = getattr(meta, "client", None)
        if client is not None:
            return client.meta.events
        if getattr(meta, "events", None) is not None:
            return meta.events
    events = getattr(target, "events", None)
    if events is not None:
        return events
    get_component = getattr(target, "get_component", None)
    if get_component is not None:
        return get_component("event_emitter")
    raise TypeError(f"Cannot find a botocore event emitter on {type(target).__name__}")


def register(target: Any, modifier: RequestModifier | None = None) -> RedirectHandler:
    """Register the redirect handler on a session, client or resource.

    Registering again replaces the previous handler.  Clients copy their
    session's handlers when they are created, so register on a session before
    creating clients from it.
    """
    events = _event_emitter(target)
    handler = RedirectHandler(modifier if modifier is not None else RequestRedirector())
    events.unregister(EVENT_NAME, unique_id=UNIQUE_ID)
    events.register(EVENT_NAME, handler, unique_id=UNIQUE_ID)
    return handler


def unregister(target: Any) -> None:
    _event_emitter(target).unregister(EVENT_NAME, unique_id=UNIQUE_ID)
