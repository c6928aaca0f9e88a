"""
Field descriptors for the intake form.

One frozen dataclass per field kind, each carrying only the settings that
kind needs. app/components.py renders them through a single
render_field() dispatch, so adding a kind means adding a class here and a
renderer there.
"""

from dataclasses import dataclass, field

from core.intake import DOCTORS, GENDER_OPTIONS, IDENTIFICATION_TYPES


@dataclass(frozen=True)
class TextInput:
    name: str
    label: str
    placeholder: str = ""
    icon: str | None = None
    input_type: str = "text"


@dataclass(frozen=True)
class PhoneInput:
    name: str
    label: str
    placeholder: str = "+91 99999 99999"


@dataclass(frozen=True)
class DatePicker:
    name: str
    label: str


@dataclass(frozen=True)
class SelectOption:
    value: str
    label: str


@dataclass(frozen=True)
class Select:
    name: str
    label: str
    placeholder: str
    options: tuple[SelectOption, ...] = ()


@dataclass(frozen=True)
class ChoiceGroup:
    """Radio group; exactly one option is chosen."""
    name: str
    label: str
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class DocumentUpload:
    name: str
    label: str


@dataclass(frozen=True)
class TextArea:
    name: str
    label: str
    placeholder: str = ""


@dataclass(frozen=True)
class Checkbox:
    name: str
    label: str


FormField = (
    TextInput | PhoneInput | DatePicker | Select | ChoiceGroup
    | DocumentUpload | TextArea | Checkbox
)


@dataclass(frozen=True)
class FormSection:
    """A titled group of rows. Fields sharing a row sit side by side on wide screens."""
    title: str
    rows: tuple[tuple[FormField, ...], ...] = field(default_factory=tuple)

    def fields(self) -> list:
        return [f for row in self.rows for f in row]


PERSONAL_INFORMATION = FormSection(
    title="Personal Information",
    rows=(
        (TextInput("name", "Full Name", "John Doe", icon="\U0001F464"),),
        (
            TextInput("email", "Email", "johndoe@gmail.com", icon="✉", input_type="email"),
            PhoneInput("phone", "Phone number"),
        ),
        (
            DatePicker("birthDate", "Date of Birth"),
            ChoiceGroup("gender", "Gender", tuple(GENDER_OPTIONS)),
        ),
        (
            TextInput("address", "Address", "3rd street, Ernakulam"),
            TextInput("occupation", "Occupation", "Software Developer"),
        ),
        (
            TextInput("emergencyContactName", "Emergency Contact Name", "Guardian's name"),
            PhoneInput("emergencyContactNumber", "Emergency Contact Number"),
        ),
    ),
)

MEDICAL_INFORMATION = FormSection(
    title="Medical Information",
    rows=(
        (
            Select(
                "primaryPhysician",
                "Primary Physician",
                "Select a physician",
                tuple(SelectOption(d, f"Dr. {d}") for d in DOCTORS),
            ),
        ),
        (
            TextInput("insuranceProvider", "Insurance Provider", "Niva Bupa / Tata AIA"),
            TextInput("insurancePolicyNumber", "Insurance Policy Number", "ABC123456789"),
        ),
        (
            TextArea("allergies", "Allergies (if any)", "Peanuts, Penicillin, Pollen"),
            TextArea("currentMedication", "Current Medication (if any)", "Ibuprofen 200mg, Calpol 500mg"),
        ),
        (
            TextArea("familyMedicalHistory", "Family Medical History",
                     "Mother had high cholesterol, father had diabetes"),
            TextArea("pastMedicalHistory", "Past Medical History", "Appendectomy, Tonsillectomy"),
        ),
    ),
)

IDENTIFICATION_AND_VERIFICATION = FormSection(
    title="Identification and Verification",
    rows=(
        (
            Select(
                "identificationType",
                "Identification Type",
                "Select Identification Type",
                tuple(SelectOption(t, t) for t in IDENTIFICATION_TYPES),
            ),
        ),
        (TextInput("identificationNumber", "Identification Number", "484892614838"),),
        (DocumentUpload("identificationDocument", "Scanned copy of identification document"),),
    ),
)

CONSENT_AND_PRIVACY = FormSection(
    title="Consent and Privacy",
    rows=(
        (Checkbox("treatmentConsent", "I consent to treatment"),),
        (Checkbox("disclosureConsent", "I consent to disclosure of information"),),
        (Checkbox("privacyConsent", "I consent to privacy policy"),),
    ),
)

INTAKE_SECTIONS = (
    PERSONAL_INFORMATION,
    MEDICAL_INFORMATION,
    IDENTIFICATION_AND_VERIFICATION,
    CONSENT_AND_PRIVACY,
)

# Landing page account form
USER_FIELDS = (
    TextInput("name", "Full Name", "John Doe", icon="\U0001F464"),
    TextInput("email", "Email", "johndoe@gmail.com", icon="✉", input_type="email"),
    PhoneInput("phone", "Phone number"),
)
