"""
Abstract base class for browser-redirect MFA providers.

This module defines the interface the verification flow depends on. The flow
only needs four things from a provider: a health check, a state token
generator, an authorization URL builder and an authorization-code exchange.
Concrete providers such as ``DuoUniversalProvider`` implement this interface,
and tests substitute their own doubles.
"""

import secrets
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

STATE_LENGTH = 36
STATE_ALPHABET = string.ascii_letters + string.digits


@dataclass
class AuthResult:
    """
    The ``auth_result`` claim of a provider verification result.

    Attributes:
        status: Outcome of the second factor (e.g. "allow", "deny")
        status_msg: Human-readable message from the provider
        result: Provider's coarse result value
    """
    status: Optional[str] = None
    status_msg: Optional[str] = None
    result: Optional[str] = None


@dataclass
class VerificationResult:
    """
    Result of exchanging an authorization code.

    Only ``auth_result.status`` decides accept or deny; the remaining
    fields are kept for logging and debugging.

    Attributes:
        auth_result: Outcome of the second factor, if the provider sent one
        username: Username the provider verified
        claims: Raw decoded claims returned by the provider
    """
    auth_result: Optional[AuthResult] = None
    username: Optional[str] = None
    claims: dict = field(default_factory=dict)


class MFAProvider(ABC):
    """
    Abstract base class for redirect-based MFA providers.

    Example usage:
        provider = DuoUniversalProvider(
            client_id="...", client_secret="...",
            api_host="api-XXXXXXXX.duosecurity.com",
            callback_url="https://sso.example.edu/duo/",
        )

        provider.health_check()
        state = provider.generate_state()
        url = provider.create_auth_url("jdoe", state)
        # ... user agent comes back with ?duo_code=...&state=...
        result = provider.exchange_authorization_code(duo_code, state, username="jdoe")
    """

    @abstractmethod
    def health_check(self) -> None:
        """
        Check that the provider is reachable and healthy.

        Raises:
            ProviderError: If the provider is unreachable or reports a failure
        """

    @abstractmethod
    def create_auth_url(self, username: str, state: str) -> str:
        """
        Build the URL the user agent is sent to for the MFA ceremony.

        Args:
            username: User reference known to the provider
            state: Anti-forgery token echoed back on the callback

        Returns:
            Absolute authorization URL

        Raises:
            ProviderError: If the URL cannot be built
        """

    @abstractmethod
    def exchange_authorization_code(
        self,
        code: str,
        state: str,
        username: Optional[str] = None,
    ) -> Optional[VerificationResult]:
        """
        Exchange a one-time authorization code for a verification result.

        Args:
            code: Authorization code from the callback
            state: Anti-forgery token the callback was validated against
            username: Expected username; checked against the result when given

        Returns:
            VerificationResult, or None if the provider returned nothing

        Raises:
            ProviderError: If the exchange call fails
        """

    def generate_state(self) -> str:
        """
        Generate an unguessable anti-forgery state token.

        Returns:
            Random alphanumeric string
        """
        return "".join(secrets.choice(STATE_ALPHABET) for _ in range(STATE_LENGTH))
