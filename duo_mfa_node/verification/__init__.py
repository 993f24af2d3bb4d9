# Duo Universal Prompt verification step.
# The flow depends on the MFAProvider interface; DuoUniversalProvider is the
# concrete implementation used by default.

from .base import AuthResult, MFAProvider, VerificationResult
from .controller import VerificationFlowController, get_verification_controller
from .duo import DuoUniversalProvider
from .exchange import AuthorizationExchanger
from .health import HealthCheck
from .outcomes import Decision, FatalError, Outcome, Redirect
from .signals import mfa_bypassed, state_mismatch, verification_completed
from .state import MappingSessionState, SessionState, StateTokenStore

__all__ = [
    # Provider interface
    "MFAProvider",
    "VerificationResult",
    "AuthResult",
    # Flow components
    "StateTokenStore",
    "SessionState",
    "MappingSessionState",
    "HealthCheck",
    "AuthorizationExchanger",
    "VerificationFlowController",
    "get_verification_controller",
    # Outcomes
    "Outcome",
    "Redirect",
    "Decision",
    "FatalError",
    # Signals
    "mfa_bypassed",
    "state_mismatch",
    "verification_completed",
    # Providers
    "DuoUniversalProvider",
]
