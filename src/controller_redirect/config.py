"""
controller_redirect.config — Controller endpoint lookup.

Each setting is looked up by its dotted name in the process-wide property
store first, then in the environment under the upper-cased, underscored name:

    opsmx.controller.aws.hostname  ->  OPSMX_CONTROLLER_AWS_HOSTNAME
    opsmx.controller.aws.port      ->  OPSMX_CONTROLLER_AWS_PORT

The lookup runs once, when a RequestRedirector is built.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from controller_redirect.models import ControllerConfig

HOSTNAME_KEY = "opsmx.controller.aws.hostname"
PORT_KEY = "opsmx.controller.aws.port"

# Process-wide properties, consulted before the environment.
PROPERTY_STORE: dict[str, str] = {}


def set_property(name: str, value: str) -> None:
    PROPERTY_STORE[name] = value


def clear_property(name: str) -> None:
    PROPERTY_STORE.pop(name, None)


def env_name(name: str) -> str:
    return name.upper().replace(".", "_")


def get_config(
    name: str,
    *,
    properties: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Return the value for name, or None if neither source has it."""
    props = PROPERTY_STORE if properties is None else properties
    value = props.get(name)
    if value is not None:
        return value
    env = os.environ if environ is None else environ
    return env.get(env_name(name))


def load_controller_config(
    *,
    properties: Mapping[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ControllerConfig:
    return ControllerConfig(
        hostname=get_config(HOSTNAME_KEY, properties=properties, environ=environ),
        port=get_config(PORT_KEY, properties=properties, environ=environ),
    )
