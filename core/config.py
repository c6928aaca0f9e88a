"""
Configuration for the CarePulse intake application.

Contains:
- Server configuration (environment-based)
- Admin access gate settings
- Patient backend connection settings
- Route constants shared by the gate and the intake form

Values are read from environment variables with sensible defaults for
local development. ADMIN_PASSKEY is a build-time value; it is never
fetched at runtime.
"""

import os

# =============================================================================
# Server Configuration (from environment variables)
# =============================================================================

# Network binding
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "5001"))

# Debug mode (enables hot reload, verbose logging)
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()

# Signs the session cookie. The cookie carries no max_age, so the browser
# drops it when the browsing session ends.
SESSION_SECRET = os.getenv("SESSION_SECRET", "dev-secret-change-in-production")

# =============================================================================
# Admin Access Gate
# =============================================================================

# Empty means the gate never unlocks.
ADMIN_PASSKEY = os.getenv("ADMIN_PASSKEY", "")

PASSKEY_LENGTH = 6
ACCESS_KEY_SESSION_KEY = "accessKey"

ADMIN_ROUTE = "/admin"
PUBLIC_ROUTE = "/"

# =============================================================================
# Patient Backend
# =============================================================================

PATIENT_API_URL = os.getenv("PATIENT_API_URL", "").rstrip("/")
PATIENT_API_KEY = os.getenv("PATIENT_API_KEY", "")

# Seconds. Applies to every backend call.
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))

# =============================================================================
# Theme
# =============================================================================

DEFAULT_THEME = os.getenv("DEFAULT_THEME", "dark")
