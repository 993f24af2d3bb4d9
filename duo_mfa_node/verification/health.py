"""
Provider health check and the fail-open / fail-closed policy.
"""

import logging

from ..conf import FailureMode
from ..exceptions import ProviderError, ProviderUnavailableError
from . import signals
from .base import MFAProvider
from .outcomes import Decision

logger = logging.getLogger(__name__)


class HealthCheck:
    """
    Checks that the provider is reachable and applies the failure policy.

    With ``FailureMode.CLOSED`` a failed check aborts the invocation. With
    ``FailureMode.OPEN`` it turns into an accept decision so that users are
    not locked out while Duo is down.
    """

    def __init__(self, provider: MFAProvider, failure_mode: FailureMode):
        self.provider = provider
        self.failure_mode = failure_mode

    def check(self) -> None:
        try:
            self.provider.health_check()
        except ProviderError as e:
            raise ProviderUnavailableError() from e

    def on_failure(self, error: ProviderUnavailableError, username=None) -> Decision:
        if self.failure_mode is FailureMode.CLOSED:
            raise error

        logger.warning(
            "Duo health check failed, but failure mode is set to open. Bypassing Duo."
        )
        signals.mfa_bypassed.send(sender=self.__class__, username=username, error=error)
        return Decision(accepted=True, bypassed=True)
