"""Tests for the patient backend client, against a mocked HTTP transport."""

import asyncio
import json
from unittest.mock import patch

import httpx
import pytest

from app.patients import (
    User,
    create_user,
    get_user,
    is_backend_configured,
    register_patient,
)
from core.intake import MultipartPayload
from conftest import PNG_BYTES

API_URL = "https://patients.carepulse.dev/v1"
RealAsyncClient = httpx.AsyncClient


@pytest.fixture
def backend():
    """
    Route backend calls to a handler the test installs.

    Yields the list of requests seen; set backend.handler before calling.
    """
    class Backend:
        handler = None
        requests = []

    def transport_handler(request):
        Backend.requests.append(request)
        return Backend.handler(request)

    def client_factory(*args, **kwargs):
        return RealAsyncClient(*args, transport=httpx.MockTransport(transport_handler), **kwargs)

    Backend.requests = []
    with patch("app.patients.PATIENT_API_URL", API_URL), \
         patch("app.patients.httpx.AsyncClient", client_factory):
        yield Backend


def record(document=None):
    return {
        "userId": "user-1",
        "name": "Jane Doe",
        "email": "jane.doe@gmail.com",
        "identificationDocument": document,
    }


class TestConfiguration:

    def test_not_configured_without_url(self):
        with patch("app.patients.PATIENT_API_URL", ""):
            assert not is_backend_configured()
            patient, error = asyncio.run(register_patient(record()))
        assert patient is None
        assert error.kind == "network"
        assert "not configured" in error.message

    def test_create_user_not_configured(self):
        with patch("app.patients.PATIENT_API_URL", ""):
            user, error = asyncio.run(create_user("Jane Doe", "jane.doe@gmail.com", "+919876543210"))
        assert user is None
        assert error == "Patient backend not configured"


class TestUsers:

    def test_create_user(self, backend):
        backend.handler = lambda r: httpx.Response(
            201, json={"id": "user-1", "name": "Jane Doe", "email": "jane.doe@gmail.com", "phone": "+919876543210"}
        )
        user, error = asyncio.run(create_user("Jane Doe", "jane.doe@gmail.com", "+919876543210"))

        assert error is None
        assert user == User("user-1", "Jane Doe", "jane.doe@gmail.com", "+919876543210")
        sent = backend.requests[0]
        assert sent.method == "POST"
        assert str(sent.url) == f"{API_URL}/users"
        assert json.loads(sent.content)["email"] == "jane.doe@gmail.com"

    def test_get_user_accepts_dollar_id(self, backend):
        backend.handler = lambda r: httpx.Response(200, json={"$id": "user-9", "name": "Jane Doe"})
        user, error = asyncio.run(get_user("user-9"))
        assert user.id == "user-9"
        assert str(backend.requests[0].url) == f"{API_URL}/users/user-9"

    def test_get_user_not_found(self, backend):
        backend.handler = lambda r: httpx.Response(404, json={"message": "No such user"})
        user, error = asyncio.run(get_user("missing"))
        assert user is None
        assert error == "No such user"

    def test_non_json_reply_is_an_error(self, backend):
        backend.handler = lambda r: httpx.Response(201, text="<html>proxy</html>")
        user, error = asyncio.run(create_user("Jane Doe", "jane.doe@gmail.com", "+919876543210"))
        assert user is None
        assert error == "Unexpected response from patient backend"

    def test_user_without_id_is_an_error(self, backend):
        backend.handler = lambda r: httpx.Response(200, json={"name": "Jane Doe"})
        user, error = asyncio.run(get_user("user-1"))
        assert user is None
        assert "without an id" in error

    def test_connection_error(self, backend):
        def fail(request):
            raise httpx.ConnectError("connection refused", request=request)

        backend.handler = fail
        user, error = asyncio.run(get_user("user-1"))
        assert user is None
        assert error.startswith("Connection error")


class TestRegisterPatient:

    def test_without_document_posts_json_only(self, backend):
        backend.handler = lambda r: httpx.Response(201, json={"id": "patient-1"})
        patient, error = asyncio.run(register_patient(record()))

        assert error is None
        assert patient == {"id": "patient-1"}
        assert len(backend.requests) == 1
        body = json.loads(backend.requests[0].content)
        assert str(backend.requests[0].url) == f"{API_URL}/patients"
        assert body["identificationDocumentId"] is None
        assert "identificationDocument" not in body

    def test_with_document_uploads_multipart_first(self, backend):
        def handler(request):
            if request.url.path.endswith("/storage/files"):
                return httpx.Response(201, json={"id": "file-1", "url": "https://files.carepulse.dev/file-1"})
            return httpx.Response(201, json={"id": "patient-1"})

        backend.handler = handler
        payload = MultipartPayload(blob_file=PNG_BYTES, content_type="image/png", file_name="passport.png")
        patient, error = asyncio.run(register_patient(record(payload)))

        assert error is None
        upload, create = backend.requests
        assert upload.headers["content-type"].startswith("multipart/form-data")
        assert b'name="blobFile"; filename="passport.png"' in upload.content
        assert b'name="fileName"' in upload.content
        assert PNG_BYTES in upload.content

        body = json.loads(create.content)
        assert body["identificationDocumentId"] == "file-1"
        assert body["identificationDocumentUrl"] == "https://files.carepulse.dev/file-1"

    def test_failed_upload_stops_registration(self, backend):
        backend.handler = lambda r: httpx.Response(413, json={"message": "File too large"})
        payload = MultipartPayload(blob_file=PNG_BYTES, content_type="image/png", file_name="passport.png")
        patient, error = asyncio.run(register_patient(record(payload)))

        assert patient is None
        assert error.kind == "rejected"
        assert error.message == "File too large"
        assert len(backend.requests) == 1

    def test_rejected_registration(self, backend):
        backend.handler = lambda r: httpx.Response(409, json={"error": "Patient already registered"})
        patient, error = asyncio.run(register_patient(record()))
        assert patient is None
        assert error.kind == "rejected"
        assert error.message == "Patient already registered"

    def test_rejection_without_json_body(self, backend):
        backend.handler = lambda r: httpx.Response(500, text="Internal Server Error")
        _, error = asyncio.run(register_patient(record()))
        assert error.message == "Registration failed"

    def test_network_failure(self, backend):
        def fail(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        backend.handler = fail
        patient, error = asyncio.run(register_patient(record()))
        assert patient is None
        assert error.kind == "network"

    def test_dates_serialized(self, backend):
        from datetime import datetime

        backend.handler = lambda r: httpx.Response(201, json={"id": "patient-1"})
        asyncio.run(register_patient({**record(), "birthDate": datetime(1990, 4, 12)}))
        body = json.loads(backend.requests[0].content)
        assert body["birthDate"] == "1990-04-12T00:00:00"

    def test_non_json_registration_reply_is_rejected(self, backend):
        backend.handler = lambda r: httpx.Response(200, text="<html>proxy</html>")
        patient, error = asyncio.run(register_patient(record()))
        assert patient is None
        assert error.kind == "rejected"

    def test_upload_reply_that_is_not_an_object_is_rejected(self, backend):
        backend.handler = lambda r: httpx.Response(201, json=["file-1"])
        payload = MultipartPayload(blob_file=PNG_BYTES, content_type="image/png", file_name="passport.png")
        patient, error = asyncio.run(register_patient(record(payload)))
        assert patient is None
        assert error.kind == "rejected"
        assert len(backend.requests) == 1
