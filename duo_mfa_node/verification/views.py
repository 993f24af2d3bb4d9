"""
Views for the Duo verification step.

A single endpoint serves as both the entry point and the Duo callback URL.
The upstream login step stores the username in the session and sends the
user agent here; the controller decides what happens next.

Flow:
1. GET /duo/ -> 302 to the Duo Universal Prompt
2. Duo redirects back to GET /duo/?duo_code=...&state=...
3. The code is exchanged and the decision is recorded in the session
"""

import logging

from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from ..constants import SESSION_VERIFIED_KEY, Messages
from . import signals
from .controller import get_verification_controller
from .outcomes import Decision, FatalError, Redirect
from .state import MappingSessionState

logger = logging.getLogger(__name__)


class DuoMFAView(APIView):
    """
    Run one step of the Duo verification flow.

    GET /duo/

    Response (decision reached):
    {
        "authenticated": true,
        "bypassed": false,
        "detail": "Duo verification succeeded."
    }
    """

    # The user is identified by the upstream step through the session
    permission_classes = (AllowAny,)

    def get(self, request, *args, **kwargs):
        controller = get_verification_controller()
        outcome = controller.process(request.session, request.query_params)

        if isinstance(outcome, Redirect):
            if outcome.tracking_cookie:
                # Make sure the session cookie is set so the callback lands
                # on the same attempt
                request.session.modified = True
            return HttpResponseRedirect(outcome.url)

        if isinstance(outcome, Decision):
            return self._decision_response(request, controller, outcome)

        if isinstance(outcome, FatalError):
            return Response(
                {"detail": outcome.error.detail},
                status=outcome.error.status_code,
            )

        raise TypeError(f"Unexpected verification outcome: {outcome!r}")

    def _decision_response(self, request, controller, outcome: Decision):
        request.session[SESSION_VERIFIED_KEY] = outcome.accepted
        username = controller.user_reference(MappingSessionState(request.session))

        logger.info(
            "Duo verification finished: user=%s authenticated=%s bypassed=%s",
            username,
            outcome.accepted,
            outcome.bypassed,
        )
        signals.verification_completed.send(
            sender=self.__class__,
            username=username,
            authenticated=outcome.accepted,
            bypassed=outcome.bypassed,
            request=request,
        )

        if outcome.bypassed:
            detail = Messages.BYPASSED
        elif outcome.accepted:
            detail = Messages.AUTHENTICATED
        else:
            detail = Messages.DENIED

        return Response(
            {
                "authenticated": outcome.accepted,
                "bypassed": outcome.bypassed,
                "detail": detail,
            },
            status=status.HTTP_200_OK if outcome.accepted else status.HTTP_403_FORBIDDEN,
        )
