"""
Passkey gate for the admin route.

The access token is the passkey run through a reversible encoding
(base64). It is an obfuscation, not a security mechanism: anyone holding
the session cookie can decode it. The gate only keeps casual visitors
away from the admin dashboard.

State machine:
    LOCKED   -> modal open, waiting for input
    CHECKING -> a submitted code is being compared
    UNLOCKED -> modal closed, admin route accessible
    DENIED   -> wrong code; error shown, still locked
"""

import base64
import binascii
import logging
from enum import Enum
from typing import MutableMapping

from core.config import (
    ACCESS_KEY_SESSION_KEY,
    ADMIN_PASSKEY,
    ADMIN_ROUTE,
    PUBLIC_ROUTE,
)

logger = logging.getLogger(__name__)

INVALID_PASSKEY_MESSAGE = "Invalid passkey. Please try again."


def encode_key(passkey: str) -> str:
    """Encode a plaintext passkey into the token kept in the session."""
    return base64.b64encode(passkey.encode("utf-8")).decode("ascii")


def decode_key(token: str | None) -> str | None:
    """
    Decode a session token back to its plaintext passkey.

    Returns None for a missing or malformed token instead of raising,
    so a tampered cookie simply leaves the gate locked.
    """
    if token is None:
        return None
    try:
        return base64.b64decode(token.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        logger.warning(f"Discarding malformed access token: {e}")
        return None


class GateState(str, Enum):
    LOCKED = "locked"
    CHECKING = "checking"
    UNLOCKED = "unlocked"
    DENIED = "denied"


class AccessGate:
    """
    Guards the admin route for one browser session.

    The session mapping is the only state shared across requests; the
    gate object itself is rebuilt on every route evaluation.
    """

    def __init__(self, session: MutableMapping, passkey: str | None = None):
        self.session = session
        self.passkey = ADMIN_PASSKEY if passkey is None else passkey
        self.state = GateState.LOCKED
        self.is_open = True
        self.error: str | None = None

    @property
    def is_locked(self) -> bool:
        return self.state in (GateState.LOCKED, GateState.DENIED)

    @property
    def redirect_to(self) -> str | None:
        """Where navigation should go once the gate has settled."""
        if self.state == GateState.UNLOCKED:
            return ADMIN_ROUTE
        return None

    def _matches(self, candidate: str | None) -> bool:
        return bool(self.passkey) and candidate == self.passkey

    def evaluate(self) -> GateState:
        """Check the stored token and open or close the gate accordingly."""
        stored = decode_key(self.session.get(ACCESS_KEY_SESSION_KEY))
        if self._matches(stored):
            self.state = GateState.UNLOCKED
            self.is_open = False
        else:
            self.state = GateState.LOCKED
            self.is_open = True
        return self.state

    def submit(self, code: str) -> GateState:
        """
        Compare an entered code with the passkey.

        A match stores the encoded token so later evaluations in the same
        session unlock without prompting. A mismatch leaves the gate open
        with a single error message; there is no retry limit.
        """
        self.state = GateState.CHECKING
        if self._matches(code):
            self.session[ACCESS_KEY_SESSION_KEY] = encode_key(code)
            self.error = None
            self.state = GateState.UNLOCKED
            self.is_open = False
            logger.info("Admin passkey accepted")
        else:
            self.error = INVALID_PASSKEY_MESSAGE
            self.state = GateState.DENIED
            self.is_open = True
            logger.info("Admin passkey rejected")
        return self.state

    def dismiss(self) -> str:
        """Close the gate without unlocking; returns the public route."""
        self.is_open = False
        return PUBLIC_ROUTE
