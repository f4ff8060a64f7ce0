"""
controller_redirect — Redirect token-authenticated AWS SDK calls to a controller.

Callers whose secret access key is an opsmx-issued token have their requests
sent to the configured controller endpoint instead of AWS, with the original
destination carried in x-opsmx-* headers.  Every other call passes through
untouched.
"""

from controller_redirect.botocore_hook import register, unregister
from controller_redirect.config import get_config, load_controller_config
from controller_redirect.exceptions import ControllerConfigurationError
from controller_redirect.models import AmbientAttributes, ControllerConfig, Credential, HttpRequest
from controller_redirect.redirector import RequestModifier, RequestRedirector

__all__ = [
    "AmbientAttributes",
    "ControllerConfig",
    "ControllerConfigurationError",
    "Credential",
    "HttpRequest",
    "RequestModifier",
    "RequestRedirector",
    "get_config",
    "load_controller_config",
    "register",
    "unregister",
]
