"""
Patient intake form.

IntakeForm is a layout and submission layer: it lays INTAKE_SECTIONS
out, hands field rules to PatientFormValidation, and passes the
assembled record to the registration call. It never checks a field
itself.

Submission failures are reported back (SubmissionResult.error and a
visible banner) rather than swallowed; the form stays interactive and
no navigation happens.
"""

import logging
from dataclasses import dataclass

from fasthtml.common import *
from pydantic import ValidationError

from app.components import form_section, submit_button, toast
from app.patients import RegistrationError, User, register_patient, results_route
from core.fields import INTAKE_SECTIONS
from core.intake import (
    PatientFormValidation,
    build_registration_request,
    default_form_values,
    field_errors,
)

logger = logging.getLogger(__name__)

FORM_ID = "intake-form"


@dataclass
class SubmissionResult:
    patient: dict | None = None
    error: RegistrationError | None = None
    redirect_to: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.patient is not None


class IntakeForm:
    """
    One intake form for one user.

    Values start from the blank defaults with the user's name, email and
    phone filled in; those come from the account created on the landing
    page.
    """

    def __init__(self, user: User, register=None):
        self.user = user
        self.register = register or register_patient
        self.values = {
            **default_form_values(),
            "name": user.name,
            "email": user.email,
            "phone": user.phone,
        }
        self.errors: dict[str, str] = {}
        self.submit_error: str | None = None
        self.is_loading = False

    @property
    def action(self) -> str:
        return f"/patients/{self.user.id}/register"

    def set_document(self, files: list) -> None:
        """on_change target for the uploader; replaces any earlier selection."""
        self.values["identificationDocument"] = files

    def validate(self, data: dict) -> PatientFormValidation | None:
        """
        Validate submitted values.

        On failure the submitted values are kept for re-rendering and
        errors maps field names to their first message.
        """
        self.values.update(data)
        try:
            validated = PatientFormValidation.model_validate(self.values)
        except ValidationError as e:
            self.errors = field_errors(e, PatientFormValidation)
            return None
        self.errors = {}
        return validated

    async def submit(self, values: PatientFormValidation) -> SubmissionResult:
        self.is_loading = True
        self.submit_error = None
        try:
            record = build_registration_request(values, self.user.id)
            patient, error = await self.register(record)
        except Exception as e:
            logger.exception(f"Registration raised for user {self.user.id}")
            patient, error = None, RegistrationError("network", f"Registration could not be completed: {e}")
        finally:
            self.is_loading = False

        if error:
            logger.warning(f"Registration failed for user {self.user.id} ({error.kind}): {error.message}")
            self.submit_error = error.message
            return SubmissionResult(error=error)
        if not patient:
            error = RegistrationError("rejected", "Registration returned no patient record")
            self.submit_error = error.message
            return SubmissionResult(error=error)

        return SubmissionResult(patient=patient, redirect_to=results_route(self.user.id))

    def render(self) -> Form:
        return Form(
            Section(
                H1("Welcome \U0001F44B", cls="text-3xl font-bold text-white"),
                P("Let us know more about yourself.", cls="text-slate-400"),
                cls="mb-12 space-y-4",
            ),
            Div(
                Span("✗", cls="mr-2"),
                Span(self.submit_error),
                id="submit-error",
                role="alert",
                cls="mb-8 px-4 py-3 rounded bg-red-900/40 border border-red-500/40 text-red-200 flex items-center",
            ) if self.submit_error else None,
            *[form_section(section, self.values, self.errors) for section in INTAKE_SECTIONS],
            submit_button("Get Started", is_loading=self.is_loading),
            id=FORM_ID,
            cls="space-y-12 flex-1",
            method="post",
            action=self.action,
            enctype="multipart/form-data",
            hx_post=self.action,
            hx_encoding="multipart/form-data",
            hx_target=f"#{FORM_ID}",
            hx_swap="outerHTML",
            hx_disabled_elt="find button[type='submit']",
        )

    def render_with_feedback(self):
        """The form plus an out-of-band error toast when the last submit failed."""
        if not self.submit_error:
            return self.render()
        return self.render(), Div(
            toast(self.submit_error, "error"),
            id="toast-container",
            hx_swap_oob="beforeend",
        )
