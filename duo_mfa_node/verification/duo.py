"""
Duo Universal Prompt provider implementation.

This module implements the MFAProvider interface against Duo's OIDC-based
Universal Prompt endpoints. Requests to Duo are authenticated with a client
assertion: a short-lived JWT signed with the client secret (HS512).

Duo API Reference: https://duo.com/docs/oauthapi

Configuration:
    Set the following in your Django settings:

    DUO_MFA = {
        "provider": "duo_mfa_node.verification.duo.DuoUniversalProvider",
        "client_id": "YOUR_DUO_CLIENT_ID",
        "client_secret": "YOUR_DUO_CLIENT_SECRET",
        "api_host": "api-XXXXXXXX.duosecurity.com",
        "callback_url": "https://sso.example.edu/duo/",
    }
"""

import logging
import secrets
import time
from typing import Optional
from urllib.parse import urlencode

import jwt
import requests

from ..exceptions import ConfigurationError, ProviderError
from .base import AuthResult, MFAProvider, VerificationResult

logger = logging.getLogger(__name__)

CLIENT_ID_LENGTH = 20
CLIENT_SECRET_LENGTH = 40
MINIMUM_STATE_LENGTH = 22
MAXIMUM_STATE_LENGTH = 1024
JWT_EXPIRATION = 300
JWT_LEEWAY = 60
SIG_ALGORITHM = "HS512"
CLIENT_ASSERTION_TYPE = "urn:ietf:params:oauth:client-assertion-type:jwt-bearer"


class DuoUniversalProvider(MFAProvider):
    """
    Duo Universal Prompt implementation.

    Duo owns the second-factor ceremony; this client only builds the
    authorization redirect and exchanges the returned ``duo_code``.
    """

    HEALTH_CHECK_ENDPOINT = "/oauth/v1/health_check"
    AUTHORIZE_ENDPOINT = "/oauth/v1/authorize"
    TOKEN_ENDPOINT = "/oauth/v1/token"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        api_host: str,
        callback_url: str,
        timeout: int = 10,
    ):
        """
        Initialize the Duo Universal provider.

        Args:
            client_id: Duo client ID (ikey), 20 characters
            client_secret: Duo client secret (skey), 40 characters
            api_host: Duo API hostname, e.g. api-XXXXXXXX.duosecurity.com
            callback_url: URL Duo redirects back to after the prompt
            timeout: Request timeout in seconds

        Raises:
            ConfigurationError: If any value is unusable
        """
        if not client_id or len(client_id) != CLIENT_ID_LENGTH:
            raise ConfigurationError("The Duo client ID is invalid.")
        if not client_secret or len(client_secret) != CLIENT_SECRET_LENGTH:
            raise ConfigurationError("The Duo client secret is invalid.")
        if not api_host:
            raise ConfigurationError("The Duo API hostname is invalid.")
        if not callback_url:
            raise ConfigurationError("The Duo callback URL is invalid.")

        self.client_id = client_id
        self.client_secret = client_secret
        self.api_host = api_host
        self.callback_url = callback_url
        self.timeout = timeout

    def _url(self, endpoint: str) -> str:
        return f"https://{self.api_host}{endpoint}"

    def _client_assertion(self, audience: str) -> str:
        """Build the signed JWT Duo expects as client authentication."""
        now = int(time.time())
        payload = {
            "iss": self.client_id,
            "sub": self.client_id,
            "aud": audience,
            "exp": now + JWT_EXPIRATION,
            "iat": now,
            "jti": secrets.token_hex(18),
        }
        return jwt.encode(payload, self.client_secret, algorithm=SIG_ALGORITHM)

    def _post(self, url: str, data: dict) -> dict:
        """POST form data to Duo and return the decoded JSON body."""
        try:
            response = requests.post(url, data=data, timeout=self.timeout)
        except requests.RequestException as e:
            logger.exception("Duo API request failed")
            raise ProviderError(f"Duo API request failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(
                f"Duo returned a non-JSON response (HTTP {response.status_code})"
            ) from e

        if not isinstance(body, dict):
            raise ProviderError(
                f"Duo returned an unexpected response (HTTP {response.status_code})"
            )

        if response.status_code != 200:
            error_detail = (
                body.get("error_description")
                or body.get("message")
                or "Unknown error"
            )
            logger.error(
                "Duo API call failed: %s (HTTP %s)",
                error_detail,
                response.status_code,
            )
            raise ProviderError(error_detail)

        return body

    def health_check(self) -> None:
        """
        Call Duo's health check endpoint.

        Raises:
            ProviderError: If Duo is unreachable or does not report ``stat: OK``
        """
        url = self._url(self.HEALTH_CHECK_ENDPOINT)
        body = self._post(
            url,
            {
                "client_id": self.client_id,
                "client_assertion": self._client_assertion(url),
            },
        )
        if body.get("stat") != "OK":
            raise ProviderError(body.get("message") or "Duo health check failed")

    def create_auth_url(self, username: str, state: str) -> str:
        """
        Build the Universal Prompt URL for ``username``.

        Args:
            username: Username as known to Duo
            state: Anti-forgery token, 22 to 1024 characters

        Returns:
            Authorization URL to redirect the user agent to
        """
        if not state or not (MINIMUM_STATE_LENGTH <= len(state) <= MAXIMUM_STATE_LENGTH):
            raise ProviderError(
                f"The Duo state must be {MINIMUM_STATE_LENGTH} to "
                f"{MAXIMUM_STATE_LENGTH} characters long"
            )
        if not username:
            raise ProviderError("The Duo username is invalid.")

        now = int(time.time())
        request_jwt = jwt.encode(
            {
                "scope": "openid",
                "redirect_uri": self.callback_url,
                "client_id": self.client_id,
                "iss": self.client_id,
                "aud": f"https://{self.api_host}",
                "exp": now + JWT_EXPIRATION,
                "state": state,
                "response_type": "code",
                "duo_uname": username,
                "use_duo_code_attribute": True,
            },
            self.client_secret,
            algorithm=SIG_ALGORITHM,
        )
        query = urlencode(
            {
                "response_type": "code",
                "client_id": self.client_id,
                "request": request_jwt,
                "redirect_uri": self.callback_url,
                "scope": "openid",
            }
        )
        return f"{self._url(self.AUTHORIZE_ENDPOINT)}?{query}"

    def exchange_authorization_code(
        self,
        code: str,
        state: str,
        username: Optional[str] = None,
    ) -> Optional[VerificationResult]:
        """
        Exchange ``duo_code`` for the signed id_token holding the 2FA result.

        The state has already been checked against the session by the time
        this is called, so it is not sent to Duo again.

        Args:
            code: ``duo_code`` from the callback
            state: Anti-forgery token the callback matched
            username: Expected ``preferred_username`` in the id_token

        Returns:
            VerificationResult built from the id_token claims
        """
        if not code:
            raise ProviderError("Missing authorization code")

        url = self._url(self.TOKEN_ENDPOINT)
        body = self._post(
            url,
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.callback_url,
                "client_assertion_type": CLIENT_ASSERTION_TYPE,
                "client_assertion": self._client_assertion(url),
            },
        )

        id_token = body.get("id_token")
        if not id_token:
            return None

        try:
            claims = jwt.decode(
                id_token,
                self.client_secret,
                algorithms=[SIG_ALGORITHM],
                audience=self.client_id,
                issuer=url,
                leeway=JWT_LEEWAY,
                options={"require": ["exp", "iat"]},
            )
        except jwt.PyJWTError as e:
            raise ProviderError(f"Invalid Duo id_token: {e}") from e

        preferred_username = claims.get("preferred_username")
        if username is not None and preferred_username != username:
            raise ProviderError("The Duo id_token was issued for a different user")

        auth_result = claims.get("auth_result")
        return VerificationResult(
            auth_result=AuthResult(
                status=auth_result.get("status"),
                status_msg=auth_result.get("status_msg"),
                result=auth_result.get("result"),
            ) if isinstance(auth_result, dict) else None,
            username=preferred_username,
            claims=claims,
        )
