"""
Patient backend client.

Every call goes over direct HTTP with httpx and returns a
(result, error) tuple instead of raising, so routes can always render
something for the visitor.

Backend endpoints (PATIENT_API_URL):
- POST /users            create the account a registration hangs off
- GET  /users/{id}       fetch it back
- POST /storage/files    multipart upload (blobFile, fileName)
- POST /patients         create the patient record

When PATIENT_API_URL is not set every call fails with a "not configured"
error.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

import httpx

from core.config import PATIENT_API_KEY, PATIENT_API_URL, REQUEST_TIMEOUT
from core.intake import MultipartPayload

logger = logging.getLogger(__name__)


def is_backend_configured() -> bool:
    return bool(PATIENT_API_URL)


@dataclass
class User:
    id: str
    name: str
    email: str
    phone: str

    @classmethod
    def from_api(cls, data: dict) -> "User":
        return cls(
            id=str(data.get("id") or data.get("$id") or ""),
            name=data.get("name", ""),
            email=data.get("email", ""),
            phone=data.get("phone", ""),
        )


@dataclass
class RegistrationError:
    """
    Why a registration did not go through.

    kind is "network" when the backend could not be reached and
    "rejected" when it answered with an error status.
    """
    kind: str
    message: str


def results_route(user_id: str) -> str:
    """Page a patient lands on after registering."""
    return f"/patients/{user_id}/new-appointment"


def _headers() -> dict:
    return {"apikey": PATIENT_API_KEY}


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict):
        return data.get("message") or data.get("error") or fallback
    return fallback


def _json_object(response: httpx.Response) -> dict | None:
    """Response body as a JSON object, or None when it is anything else."""
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def _user_from(response: httpx.Response) -> tuple[User | None, str | None]:
    data = _json_object(response)
    if data is None:
        return None, "Unexpected response from patient backend"
    user = User.from_api(data)
    if not user.id:
        return None, "Patient backend returned a user without an id"
    return user, None


def _jsonable(record: dict) -> dict:
    out = {}
    for key, value in record.items():
        if isinstance(value, (date, datetime)):
            value = value.isoformat()
        out[key] = value
    return out


async def create_user(name: str, email: str, phone: str) -> tuple[User | None, str | None]:
    """Create the user account that the intake form registers against."""
    if not is_backend_configured():
        return None, "Patient backend not configured"

    try:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            response = await client.post(
                f"{PATIENT_API_URL}/users",
                json={"name": name, "email": email, "phone": phone},
                headers=_headers(),
            )

            if response.status_code in (200, 201):
                return _user_from(response)
            else:
                return None, _error_message(response, "Could not create user")
    except httpx.HTTPError as e:
        return None, f"Connection error: {e}"


async def get_user(user_id: str) -> tuple[User | None, str | None]:
    """Fetch a user by id."""
    if not is_backend_configured():
        return None, "Patient backend not configured"

    try:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            response = await client.get(
                f"{PATIENT_API_URL}/users/{user_id}",
                headers=_headers(),
            )

            if response.status_code == 200:
                return _user_from(response)
            else:
                return None, _error_message(response, "User not found")
    except httpx.HTTPError as e:
        return None, f"Connection error: {e}"


async def upload_document(
    client: httpx.AsyncClient, payload: MultipartPayload
) -> tuple[dict | None, RegistrationError | None]:
    """Send an identification document as multipart form data."""
    files, data = payload.as_multipart()
    try:
        response = await client.post(
            f"{PATIENT_API_URL}/storage/files",
            files=files,
            data=data,
            headers=_headers(),
        )
    except httpx.HTTPError as e:
        return None, RegistrationError("network", f"Connection error: {e}")

    if response.status_code not in (200, 201):
        return None, RegistrationError(
            "rejected", _error_message(response, "Document upload failed")
        )
    uploaded = _json_object(response)
    if uploaded is None:
        return None, RegistrationError("rejected", "Unexpected response to document upload")
    return uploaded, None


async def register_patient(record: dict) -> tuple[dict | None, RegistrationError | None]:
    """
    Register a patient.

    record["identificationDocument"] is either None or a MultipartPayload.
    A payload is uploaded first and the record then references it by id
    and url; the binary content never goes into the JSON body.

    Returns (patient, None) on success, where patient carries at least
    an "id", or (None, RegistrationError) on failure.
    """
    if not is_backend_configured():
        return None, RegistrationError("network", "Patient backend not configured")

    body = {k: v for k, v in record.items() if k != "identificationDocument"}
    payload = record.get("identificationDocument")

    async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
        if payload is not None:
            uploaded, error = await upload_document(client, payload)
            if error:
                return None, error
            body["identificationDocumentId"] = uploaded.get("id")
            body["identificationDocumentUrl"] = uploaded.get("url")
        else:
            body["identificationDocumentId"] = None
            body["identificationDocumentUrl"] = None

        try:
            response = await client.post(
                f"{PATIENT_API_URL}/patients",
                json=_jsonable(body),
                headers=_headers(),
            )
        except httpx.HTTPError as e:
            return None, RegistrationError("network", f"Connection error: {e}")

    if response.status_code not in (200, 201):
        return None, RegistrationError(
            "rejected", _error_message(response, "Registration failed")
        )

    patient = _json_object(response)
    if patient is None:
        return None, RegistrationError("rejected", "Unexpected response to registration")
    logger.info(f"Registered patient for user {record.get('userId')}")
    return patient, None
