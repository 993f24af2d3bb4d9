"""
Verification flow state machine.

The controller keeps no state of its own. Each call works out the phase
from the session and the request parameters:

1. Initiate: no callback parameters. Store a fresh state token and redirect
   the user agent to the provider.
2. Restart-on-mismatch: callback parameters, but the stored token is
   missing or differs from the returned ``state``. Forget the token and
   start over as in (1).
3. Validate: the tokens match. Exchange the code and decide.

The provider health check runs once per call before any of this.
"""

import logging
from functools import lru_cache
from typing import Any, Mapping, Optional

from django.core.signals import setting_changed
from django.dispatch import receiver
from django.utils.module_loading import import_string

from ..conf import DuoConfig, settings
from ..constants import RESP_DUO_CODE, RESP_STATE
from ..exceptions import (AuthorizationUrlError, FlowError, MissingUserError,
                          ProviderError, ProviderUnavailableError)
from . import signals
from .base import MFAProvider
from .exchange import AuthorizationExchanger
from .health import HealthCheck
from .outcomes import Decision, FatalError, Outcome, Redirect
from .state import MappingSessionState, SessionState, StateTokenStore

logger = logging.getLogger(__name__)


def _first_value(parameters: Mapping[str, Any], key: str) -> Optional[str]:
    """Return the first value for ``key`` from a QueryDict or plain mapping."""
    if hasattr(parameters, "getlist"):
        values = parameters.getlist(key)
    else:
        values = parameters.get(key)
    if isinstance(values, (list, tuple)):
        values = values[0] if values else None
    return values


class VerificationFlowController:
    """
    Drives one step of the Duo verification flow per invocation.

    Example usage:
        controller = VerificationFlowController(config, provider)
        outcome = controller.process(request.session, request.GET)
    """

    def __init__(
        self,
        config: DuoConfig,
        provider: MFAProvider,
        username_session_key: str = "username",
    ):
        self.config = config
        self.provider = provider
        self.username_session_key = username_session_key
        self.health_check = HealthCheck(provider, config.failure_mode)
        self.state_store = StateTokenStore(provider)
        self.exchanger = AuthorizationExchanger(provider)

        logger.debug(
            "Initialized Duo node with clientID = %s, secret = %s characters, "
            "API hostname = %s, callback URI = %s, failure mode = %s",
            config.client_id,
            len(config.client_secret),
            config.api_host,
            config.callback_url,
            config.failure_mode.value,
        )

    def process(self, session, parameters: Mapping[str, Any]) -> Outcome:
        """
        Run one invocation of the flow.

        Args:
            session: SessionState, or a mutable mapping such as request.session
            parameters: Query parameters of the current request

        Returns:
            Redirect, Decision or FatalError
        """
        if not isinstance(session, SessionState):
            session = MappingSessionState(session)

        try:
            return self._process(session, parameters)
        except FlowError as e:
            logger.error("Duo verification aborted: %s", e.detail)
            return FatalError(error=e)

    def _process(self, session: SessionState, parameters) -> Outcome:
        username = self.user_reference(session)

        try:
            self.health_check.check()
        except ProviderUnavailableError as e:
            return self.health_check.on_failure(e, username=username)

        code = _first_value(parameters, RESP_DUO_CODE)
        returned_state = _first_value(parameters, RESP_STATE)

        if code is not None and returned_state is not None:
            stored_state = self.state_store.get(session)
            if stored_state is None:
                logger.warning(
                    "Detected Duo callback without initialized session. "
                    "This may be a spoofing attempt (or a timed out session)."
                )
                self._restart(session, username, "missing")
            elif stored_state != returned_state:
                logger.warning(
                    "Detected Duo callback with invalid session. "
                    "This may be a spoofing attempt (or a timed out session)."
                )
                self._restart(session, username, "mismatch")
            else:
                authenticated = self.exchanger.exchange(code, stored_state, username=username)
                return Decision(accepted=authenticated)

        return self._initiate(session, username)

    def _restart(self, session: SessionState, username: str, reason: str) -> None:
        self.state_store.clear(session)
        signals.state_mismatch.send(sender=self.__class__, username=username, reason=reason)

    def _initiate(self, session: SessionState, username: str) -> Redirect:
        state = self.state_store.generate()
        self.state_store.put(session, state)

        try:
            url = self.provider.create_auth_url(username, state)
        except ProviderError as e:
            raise AuthorizationUrlError() from e

        return Redirect(url=url, method="GET", tracking_cookie=True)

    def user_reference(self, session: SessionState) -> str:
        """Return the lowercased username the upstream step stored in ``session``."""
        username = session.get(self.username_session_key)
        if not username or not str(username).strip():
            raise MissingUserError()
        return str(username).lower()


@lru_cache(maxsize=None)
def get_verification_controller() -> VerificationFlowController:
    """
    Build the controller from Django settings.

    The result is cached for the life of the process; the cache is cleared
    whenever ``DUO_MFA`` changes.

    Raises:
        ConfigurationError: If the Duo configuration is unusable
    """
    config = DuoConfig.from_settings()

    provider_class = settings.PROVIDER
    if isinstance(provider_class, str):
        provider_class = import_string(provider_class)

    provider = provider_class(
        client_id=config.client_id,
        client_secret=config.client_secret,
        api_host=config.api_host,
        callback_url=config.callback_url,
        timeout=settings.TIMEOUT,
    )
    return VerificationFlowController(
        config,
        provider,
        username_session_key=settings.USERNAME_SESSION_KEY,
    )


@receiver(setting_changed)
def _reset_controller(sender, setting, **kwargs):
    if setting == "DUO_MFA":
        get_verification_controller.cache_clear()
