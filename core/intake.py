"""
Patient intake record: options, defaults, validation schema and the
request assembled for the registration call.

The schema is the only place field rules live. Form layout code
(core/fields.py, app/forms.py) never repeats them.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

# =============================================================================
# Options
# =============================================================================

GENDER_OPTIONS = ["Male", "Female", "Other"]

IDENTIFICATION_TYPES = [
    "Birth Certificate",
    "Driver's License",
    "Medical Insurance Card/Policy",
    "Military ID Card",
    "National Identity Card",
    "Passport",
    "Resident Alien Card (Green Card)",
    "Social Security Card",
    "State ID Card",
    "Student ID Card",
    "Voter ID Card",
]

DOCTORS = [
    "John Green",
    "Leila Cameron",
    "David Livingston",
    "Evan Peter",
    "Jane Powell",
    "Alex Ramirez",
    "Jasmine Lee",
    "Alyana Cruz",
    "Hardik Sharma",
]


def default_form_values() -> dict:
    """Blank intake values, keyed by form field name. birthDate is today."""
    return {
        "name": "",
        "email": "",
        "phone": "",
        "birthDate": date.today(),
        "gender": "Male",
        "address": "",
        "occupation": "",
        "emergencyContactName": "",
        "emergencyContactNumber": "",
        "primaryPhysician": "",
        "insuranceProvider": "",
        "insurancePolicyNumber": "",
        "allergies": "",
        "currentMedication": "",
        "familyMedicalHistory": "",
        "pastMedicalHistory": "",
        "identificationType": "Birth Certificate",
        "identificationNumber": "",
        "identificationDocument": [],
        "treatmentConsent": False,
        "disclosureConsent": False,
        "privacyConsent": False,
    }


# =============================================================================
# Files
# =============================================================================

@dataclass
class UploadedFile:
    """A single uploaded file, held in memory until submission."""
    filename: str
    content_type: str
    content: bytes

    @classmethod
    async def from_upload(cls, upload) -> "UploadedFile":
        """Read a Starlette UploadFile into memory."""
        content = await upload.read()
        return cls(
            filename=upload.filename or "",
            content_type=upload.content_type or "application/octet-stream",
            content=content,
        )


@dataclass
class MultipartPayload:
    """
    File content packaged for multipart upload.

    The registration backend takes binary content as a multipart part
    (blobFile) plus its original name (fileName), never inline in JSON.
    """
    blob_file: bytes
    content_type: str
    file_name: str

    @classmethod
    def from_file(cls, uploaded: UploadedFile) -> "MultipartPayload":
        return cls(
            blob_file=uploaded.content,
            content_type=uploaded.content_type,
            file_name=uploaded.filename,
        )

    def as_multipart(self) -> tuple[dict, dict]:
        """Return (files, data) in the shape httpx expects."""
        files = {"blobFile": (self.file_name, self.blob_file, self.content_type)}
        data = {"fileName": self.file_name}
        return files, data


# =============================================================================
# Validation schema
# =============================================================================

_PHONE_PATTERN = re.compile(r"^\+\d{10,15}$")
_PHONE_SEPARATORS = re.compile(r"[\s\-().]")


def normalize_phone(v: str) -> str:
    """Strip separators and require E.164 form (+ then 10-15 digits)."""
    normalized = _PHONE_SEPARATORS.sub("", v)
    if not _PHONE_PATTERN.match(normalized):
        raise ValueError("Invalid phone number")
    return normalized


class PatientFormValidation(BaseModel):
    """Field rules for the intake form. Accepts camelCase form names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone: str
    birth_date: date
    gender: Literal["Male", "Female", "Other"]
    address: str = Field(..., min_length=5, max_length=500)
    occupation: str = Field(..., min_length=2, max_length=500)
    emergency_contact_name: str = Field(..., min_length=2, max_length=50)
    emergency_contact_number: str
    primary_physician: str
    insurance_provider: str = Field(..., min_length=2, max_length=50)
    insurance_policy_number: str = Field(..., min_length=2, max_length=50)
    allergies: str | None = None
    current_medication: str | None = None
    family_medical_history: str | None = None
    past_medical_history: str | None = None
    identification_type: str | None = None
    identification_number: str | None = None
    identification_document: list[UploadedFile] | None = None
    treatment_consent: bool = Field(default=False, validate_default=True)
    disclosure_consent: bool = Field(default=False, validate_default=True)
    privacy_consent: bool = Field(default=False, validate_default=True)

    @field_validator("phone", "emergency_contact_number")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return normalize_phone(v)

    @field_validator("primary_physician")
    @classmethod
    def validate_physician(cls, v: str) -> str:
        if len(v) < 2:
            raise ValueError("Select at least one doctor")
        return v

    @field_validator("treatment_consent")
    @classmethod
    def validate_treatment_consent(cls, v: bool) -> bool:
        if not v:
            raise ValueError("You must consent to treatment in order to proceed")
        return v

    @field_validator("disclosure_consent")
    @classmethod
    def validate_disclosure_consent(cls, v: bool) -> bool:
        if not v:
            raise ValueError("You must consent to disclosure in order to proceed")
        return v

    @field_validator("privacy_consent")
    @classmethod
    def validate_privacy_consent(cls, v: bool) -> bool:
        if not v:
            raise ValueError("You must consent to privacy in order to proceed")
        return v


class UserFormValidation(BaseModel):
    """The short form on the landing page that creates the user account."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone: str

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        return normalize_phone(v)


def field_errors(
    exc: ValidationError, model: type[BaseModel] = PatientFormValidation
) -> dict[str, str]:
    """
    Flatten a ValidationError into {form field name: first message}.

    Input errors are located by alias, but errors on defaulted values
    (the consents) are located by attribute name. Both are mapped to the
    alias so keys line up with the rendered input names.
    """
    aliases = {name: info.alias or name for name, info in model.model_fields.items()}
    errors: dict[str, str] = {}
    for err in exc.errors():
        if not err["loc"]:
            continue
        field = str(err["loc"][0])
        field = aliases.get(field, field)
        message = err["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.setdefault(field, message)
    return errors


# =============================================================================
# Registration request
# =============================================================================

def build_registration_request(values: PatientFormValidation, user_id: str) -> dict:
    """
    Assemble the record handed to the registration call.

    identificationDocument is a MultipartPayload built from the first file
    when one was supplied, and None otherwise; an empty payload is never
    sent.
    """
    payload = None
    if values.identification_document:
        payload = MultipartPayload.from_file(values.identification_document[0])

    record = values.model_dump(by_alias=True, exclude={"identification_document"})
    record["userId"] = user_id
    record["birthDate"] = datetime.combine(values.birth_date, time())
    record["identificationDocument"] = payload
    return record
