"""
Exchange of the Duo authorization code for an accept or deny decision.
"""

import logging
from typing import Optional

from ..constants import DUO_TOKEN_SUCCESSFUL_RESULT
from ..exceptions import ExchangeError, ProviderError
from .base import MFAProvider, VerificationResult

logger = logging.getLogger(__name__)


def is_successful(result: Optional[VerificationResult]) -> bool:
    """Accept only a result whose auth_result.status is "allow" (any case)."""
    if result is None or result.auth_result is None:
        return False
    status = result.auth_result.status
    if not status:
        return False
    return status.lower() == DUO_TOKEN_SUCCESSFUL_RESULT


class AuthorizationExchanger:
    """Trades an authorization code for the provider's verdict."""

    def __init__(self, provider: MFAProvider):
        self.provider = provider

    def exchange(self, code: str, state: str, username: Optional[str] = None) -> bool:
        """
        Exchange ``code`` and interpret the result.

        Args:
            code: Authorization code from the callback
            state: Stored anti-forgery token the callback matched
            username: Expected username for the result

        Returns:
            True to accept, False to deny

        Raises:
            ExchangeError: If the provider call fails; never downgraded to deny
        """
        try:
            result = self.provider.exchange_authorization_code(code, state, username=username)
        except ProviderError as e:
            raise ExchangeError() from e

        authenticated = is_successful(result)
        logger.debug("Duo validation result: %s", authenticated)
        return authenticated
