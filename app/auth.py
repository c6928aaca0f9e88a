"""
Admin access control.

The admin dashboard sits behind a passkey gate (core/passkey.py). The
unlocked state lives in the session cookie, so it lasts until the
browser session ends. There is no logout.

Unlike the gate's own routes, protected routes never render the modal:
they redirect to the landing page with ?admin=true, which does.
"""

from starlette.responses import RedirectResponse, Response

from core.config import PUBLIC_ROUTE
from core.passkey import AccessGate

ADMIN_PROMPT_ROUTE = f"{PUBLIC_ROUTE}?admin=true"


def gate_for(sess) -> AccessGate:
    """Build the gate for this request and evaluate the stored token."""
    gate = AccessGate(sess if sess is not None else {})
    gate.evaluate()
    return gate


def is_unlocked(sess) -> bool:
    return not gate_for(sess).is_locked


def check_passkey(sess) -> Response | None:
    """Return a 303 redirect to the passkey prompt if the gate is locked, else None."""
    if not is_unlocked(sess):
        return RedirectResponse(ADMIN_PROMPT_ROUTE, status_code=303)
    return None
