"""
controller_redirect.exceptions — Errors surfaced to the SDK caller.

Token rejections are never errors.  The only thing that can fail a request is
an operator mistake in the controller configuration.
"""


class ControllerConfigurationError(ValueError):
    """
    Raised when the configured controller endpoint cannot be used.

    Surfaces at the moment a redirect is attempted, so a misconfigured
    controller fails the redirected call loudly instead of silently sending
    the request to the wrong place.

    Attributes:
        name:  Which setting is bad ("hostname" or "port").
        value: The raw configured value.
    """

    def __init__(self, *, name: str, value: str | None) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid controller {name} configured: {value!r}")
