"""
Django signals for the Duo verification flow.

These signals make the operator-relevant events of the flow observable.
Connect to them to alert on prolonged fail-open bypass or on bursts of
state mismatches.

Example usage:
    from django.dispatch import receiver
    from duo_mfa_node.verification.signals import mfa_bypassed

    @receiver(mfa_bypassed)
    def alert_on_bypass(sender, username, error, **kwargs):
        logger.error("Duo bypassed for %s: %s", username, error)
"""

from django.dispatch import Signal

# Fired when the health check fails and failure mode is OPEN
# Provides: username (str), error (ProviderUnavailableError)
mfa_bypassed = Signal()

# Fired when a callback arrives without a matching stored state
# Provides: username (str), reason ("missing" or "mismatch")
state_mismatch = Signal()

# Fired by the view when a decision has been reached
# Provides: username (str), authenticated (bool), bypassed (bool), request
verification_completed = Signal()
