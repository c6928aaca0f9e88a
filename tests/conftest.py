"""Shared test fixtures for gate, intake and UI tests."""

import pytest
from unittest.mock import AsyncMock, patch

from starlette.testclient import TestClient


PASSKEY = "123456"

# Headers the theme placeholder's load request carries. Pages only send
# their content to requests that look like this.
READY_HEADERS = {"HX-Request": "true", "HX-Target": "theme-host"}
HTMX_HEADERS = {"HX-Request": "true"}

VALID_INTAKE = {
    "name": "Jane Doe",
    "email": "jane.doe@gmail.com",
    "phone": "+919876543210",
    "birthDate": "1990-04-12",
    "gender": "Female",
    "address": "12 Marine Drive, Kochi",
    "occupation": "Teacher",
    "emergencyContactName": "John Doe",
    "emergencyContactNumber": "+919812345678",
    "primaryPhysician": "Leila Cameron",
    "insuranceProvider": "Niva Bupa",
    "insurancePolicyNumber": "NB123456789",
    "allergies": "",
    "currentMedication": "",
    "familyMedicalHistory": "",
    "pastMedicalHistory": "",
    "identificationType": "Passport",
    "identificationNumber": "P1234567",
    "treatmentConsent": "on",
    "disclosureConsent": "on",
    "privacyConsent": "on",
}

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


# ---------------------------------------------------------------------------
# App fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def client():
    """Create a fresh test client for the FastHTML app."""
    from app.main import app
    return TestClient(app)


@pytest.fixture
def passkey_configured():
    """Configure the admin passkey as 123456."""
    with patch("core.passkey.ADMIN_PASSKEY", PASSKEY):
        yield PASSKEY


@pytest.fixture
def passkey_unset():
    """No admin passkey configured."""
    with patch("core.passkey.ADMIN_PASSKEY", ""):
        yield


# ---------------------------------------------------------------------------
# Backend fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def user():
    from app.patients import User
    return User(id="user-1", name="Jane Doe", email="jane.doe@gmail.com", phone="+919876543210")


@pytest.fixture
def known_user(user):
    """get_user resolves to the test user."""
    with patch("app.main.get_user", AsyncMock(return_value=(user, None))):
        yield user


@pytest.fixture
def missing_user():
    """get_user finds nobody."""
    with patch("app.main.get_user", AsyncMock(return_value=(None, "User not found"))):
        yield


@pytest.fixture
def registration_succeeds():
    """register_patient accepts every record."""
    mock = AsyncMock(return_value=({"id": "patient-1"}, None))
    with patch("app.forms.register_patient", mock):
        yield mock


@pytest.fixture
def registration_rejected():
    """register_patient answers with a server-side rejection."""
    from app.patients import RegistrationError
    mock = AsyncMock(return_value=(None, RegistrationError("rejected", "Patient already registered")))
    with patch("app.forms.register_patient", mock):
        yield mock


@pytest.fixture
def valid_intake():
    return dict(VALID_INTAKE)
