# Query parameters Duo appends to the callback URL
RESP_DUO_CODE = "duo_code"
RESP_STATE = "state"

# Session keys
SESSION_STATE_KEY = "duo_mfa_state"
SESSION_VERIFIED_KEY = "duo_mfa_verified"

# auth_result.status value Duo reports for a successful second factor
DUO_TOKEN_SUCCESSFUL_RESULT = "allow"


class Messages:
    AUTHENTICATED = "Duo verification succeeded."
    DENIED = "Duo verification was denied."
    BYPASSED = "Duo is unavailable; verification was bypassed."
