"""
Error taxonomy for the Duo MFA step.

Configuration problems are raised while the controller is being built and
never reach an invocation. ``FlowError`` subclasses abort a single
invocation and are handed to the host as a ``FatalError`` outcome.
A missing or mismatched anti-forgery token is not an error at all; the
controller simply restarts the ceremony.
"""

from django.core.exceptions import ImproperlyConfigured


class DuoMFAError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(DuoMFAError, ImproperlyConfigured):
    """The Duo client could not be built from the configured values."""


class ProviderError(DuoMFAError):
    """A call to the MFA provider failed or returned an unusable payload."""


class FlowError(DuoMFAError):
    """Fatal for the current invocation. No decision edge is taken."""

    status_code = 500
    default_detail = "Duo verification could not be completed."

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ProviderUnavailableError(FlowError):
    status_code = 503
    default_detail = "Duo health check failed. Cannot proceed."


class ExchangeError(FlowError):
    status_code = 502
    default_detail = "Unable to exchange authorization code for result."


class AuthorizationUrlError(FlowError):
    status_code = 502
    default_detail = "Unable to create Duo authentication URL."


class MissingUserError(FlowError):
    status_code = 400
    default_detail = "No authenticated username is available for Duo verification."
