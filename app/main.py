"""
CarePulse patient intake.

Server-rendered FastHTML app: a landing page that creates the user
account, the multi-section registration form, a passkey-gated admin
dashboard, and the two-phase theme host that wraps every page.

Navigation after an HTMX request uses HX-Redirect; plain form posts get
a 303.
"""

import logging
import sys
from pathlib import Path

from fasthtml.common import *
from pydantic import ValidationError
from starlette.datastructures import UploadFile
from starlette.responses import RedirectResponse

# Add project root to path for imports
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from core.config import (
    ADMIN_PASSKEY,
    ADMIN_ROUTE,
    DEBUG,
    HOST,
    LOG_LEVEL,
    PORT,
    SESSION_SECRET,
)
from core.fields import USER_FIELDS
from core.intake import UploadedFile, UserFormValidation, field_errors
from core.passkey import AccessGate
from core.theme import resolve_theme, set_theme
from app.auth import check_passkey, gate_for
from app.components import (
    FileUploader,
    THEME_HOST_ID,
    file_preview,
    passkey_modal,
    render_field,
    submit_button,
    theme_host,
    toast_container,
)
from app.forms import IntakeForm
from app.patients import create_user, get_user, is_backend_configured

logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s: %(name)s: %(message)s")
logger = logging.getLogger(__name__)

DOCUMENT_FIELD = "identificationDocument"

# Session cookie has no max_age: it lives for the browser session only.
app, rt = fast_app(
    pico=False,
    secret_key=SESSION_SECRET,
    max_age=None,
    hdrs=(
        Meta(name="viewport", content="width=device-width, initial-scale=1"),
        Script(src="https://cdn.tailwindcss.com"),
        Script("tailwind.config = { darkMode: 'class' }"),
        # Hyperscript drives toast auto-dismiss
        Script(src="https://unpkg.com/hyperscript.org@0.9.12"),
        Style("""
            .htmx-indicator { display: none; }
            .htmx-request .htmx-indicator, .htmx-request.htmx-indicator { display: inline; }
        """),
    ),
)


# =============================================================================
# HELPERS
# =============================================================================

def navigate(request, url: str) -> Response:
    """Send the browser to url, whether the request came from HTMX or a plain form."""
    if request.headers.get("HX-Request"):
        return Response("", headers={"HX-Redirect": url})
    return RedirectResponse(url, status_code=303)


def page(request, sess, title: str, *content):
    """
    Wrap content in the theme host.

    The first (full page) request gets only the placeholder. The
    placeholder's own load-triggered request targets the host and gets
    the themed content.
    """
    ready = request.headers.get("HX-Target") == THEME_HOST_ID
    theme = resolve_theme(sess if sess is not None else {}, request.headers)
    ready_url = request.url.path
    if request.url.query:
        ready_url = f"{ready_url}?{request.url.query}"

    host = theme_host(
        toast_container(),
        Main(*content, cls="max-w-3xl mx-auto px-4 sm:px-8 py-10"),
        theme=theme,
        ready=ready,
        ready_url=ready_url,
    )
    if ready:
        return host
    return Title(f"{title} - CarePulse"), host


def user_form(values: dict | None = None, errors: dict | None = None, message: str | None = None) -> Form:
    values = values or {}
    errors = errors or {}
    return Form(
        Section(
            H1("Hi there \U0001F44B", cls="text-3xl font-bold text-white"),
            P("Get started with appointments.", cls="text-slate-400"),
            cls="mb-12 space-y-4",
        ),
        P(message, cls="text-red-400 text-sm", role="alert") if message else None,
        *[render_field(f, values.get(f.name), errors.get(f.name)) for f in USER_FIELDS],
        submit_button("Get Started"),
        id="user-form",
        cls="space-y-6",
        method="post",
        action="/patients",
        hx_post="/patients",
        hx_target="#user-form",
        hx_swap="outerHTML",
    )


async def read_intake(request) -> tuple[dict, list[UploadedFile]]:
    """Split the submitted form into plain values and uploaded files."""
    form = await request.form()
    data = {key: form.get(key) for key in form.keys() if key != DOCUMENT_FIELD}
    uploads = [u for u in form.getlist(DOCUMENT_FIELD) if isinstance(u, UploadFile) and u.filename]
    files = [await UploadedFile.from_upload(u) for u in uploads]
    return data, files


def not_found(request, sess, message: str):
    return page(
        request, sess, "Not found",
        H1("Not found", cls="text-2xl font-bold text-white mb-2"),
        P(message, cls="text-slate-400"),
        A("Back to start", href="/", cls="text-emerald-400 hover:underline"),
    )


# =============================================================================
# ROUTES - HEALTH CHECK
# =============================================================================

@rt("/health")
def health():
    """Health check endpoint."""
    return {
        "status": "ok",
        "backend_configured": is_backend_configured(),
        "passkey_configured": bool(ADMIN_PASSKEY),
    }


# =============================================================================
# ROUTES - LANDING & ACCOUNT
# =============================================================================

@rt("/")
def get(request, sess, admin: str = ""):
    """
    Landing page with the account form.

    With ?admin=true the passkey modal is shown on top, unless this
    session already unlocked the gate, in which case it goes straight
    to the dashboard.
    """
    modal = None
    if admin == "true":
        gate = gate_for(sess)
        if gate.redirect_to:
            return RedirectResponse(gate.redirect_to, status_code=303)
        modal = passkey_modal(gate)

    return page(
        request, sess, "Welcome",
        user_form(),
        P(
            "© 2024 CarePulse",
            A("Admin", href="/?admin=true", cls="text-emerald-400 hover:underline"),
            cls="flex justify-between text-sm text-slate-500 mt-16",
        ),
        modal,
    )


@rt("/patients")
async def post(request, sess):
    """Create the user account, then continue to the registration form."""
    form = await request.form()
    values = {f.name: form.get(f.name, "") for f in USER_FIELDS}
    try:
        validated = UserFormValidation.model_validate(values)
    except ValidationError as e:
        return user_form(values, field_errors(e, UserFormValidation))

    user, error = await create_user(validated.name, validated.email, validated.phone)
    if error:
        logger.warning(f"Could not create user: {error}")
        return user_form(values, message=error)
    return navigate(request, f"/patients/{user.id}/register")


# =============================================================================
# ROUTES - REGISTRATION
# =============================================================================

@rt("/patients/{user_id}/register")
async def get(user_id: str, request, sess):
    """Registration form prefilled from the user account."""
    user, error = await get_user(user_id)
    if not user:
        return not_found(request, sess, error or "User not found")
    return page(request, sess, "Register", IntakeForm(user).render())


@rt("/patients/{user_id}/register")
async def post(user_id: str, request, sess):
    """
    Validate and submit the intake form.

    Validation errors and submission failures re-render the form in
    place; only a successful registration navigates away.
    """
    user, error = await get_user(user_id)
    if not user:
        return Response(error or "User not found", status_code=404)

    intake = IntakeForm(user)
    data, files = await read_intake(request)
    if files:
        FileUploader(on_change=intake.set_document).drop(files)

    validated = intake.validate(data)
    if validated is None:
        return intake.render()

    result = await intake.submit(validated)
    if result.ok:
        return navigate(request, result.redirect_to)
    return intake.render_with_feedback()


@rt("/uploads/preview")
async def post(request):
    """Preview fragment for a newly dropped or picked document."""
    _, files = await read_intake(request)
    selected: list[UploadedFile] = []
    FileUploader(on_change=selected.extend).drop(files)
    return file_preview(selected)


@rt("/patients/{user_id}/new-appointment")
async def get(user_id: str, request, sess):
    """Where a patient lands once registered."""
    user, _ = await get_user(user_id)
    greeting = f"Thanks, {user.name}!" if user else "Thanks!"
    return page(
        request, sess, "New appointment",
        Div(
            Div(
                Span("✓", cls="text-emerald-400 text-3xl"),
                H1(greeting, cls="text-2xl font-bold text-white"),
                cls="flex items-center gap-3 mb-2",
            ),
            P("Your registration is complete. Request a new appointment in 10 seconds.", cls="text-slate-400"),
            id="new-appointment",
        ),
    )


# =============================================================================
# ROUTES - ADMIN ACCESS
# =============================================================================

@rt("/admin/passkey")
async def post(request, sess):
    """Check an entered passkey. The code arrives whole or as one field per slot."""
    form = await request.form()
    code = form.get("passkey") or "".join(
        form.get(key, "") for key in sorted(k for k in form.keys() if k.startswith("passkey_"))
    )

    gate = gate_for(sess)
    gate.submit(code)
    if gate.redirect_to:
        return navigate(request, gate.redirect_to)
    return passkey_modal(gate)


@rt("/admin/passkey/close")
def post(request, sess):
    """Dismiss the passkey prompt and go back to the public page."""
    gate = AccessGate(sess)
    return navigate(request, gate.dismiss())


@rt("/admin")
def get(request, sess):
    """Admin dashboard. Requires an unlocked passkey gate."""
    denied = check_passkey(sess)
    if denied:
        return denied
    return page(
        request, sess, "Admin",
        Section(
            H1("Welcome \U0001F44B", cls="text-3xl font-bold text-white"),
            P("Start the day with managing new appointments", cls="text-slate-400"),
            cls="space-y-4",
            id="admin-dashboard",
        ),
    )


# =============================================================================
# ROUTES - THEME
# =============================================================================

@rt("/theme/{name}")
def post(name: str, sess):
    """Switch color scheme for this session."""
    if not set_theme(sess, name):
        return Response(f"Unknown theme: {name}", status_code=400)
    return Response("", headers={"HX-Refresh": "true"})


if __name__ == "__main__":
    # Startup diagnostics
    print("=" * 60)
    print("CAREPULSE STARTUP")
    print("=" * 60)
    print(f"[config] Host: {HOST}")
    print(f"[config] Port: {PORT}")
    print(f"[config] Debug: {DEBUG}")
    print(f"[config] Log level: {LOG_LEVEL}")
    print(f"[config] Patient backend configured: {is_backend_configured()}")
    if not ADMIN_PASSKEY:
        print("[config] WARNING: ADMIN_PASSKEY is not set; the admin page cannot be unlocked")
    print(f"[routes] Admin: {ADMIN_ROUTE}")
    print("=" * 60)
    print(f"Server starting at http://{HOST}:{PORT}")
    print("=" * 60)

    serve(host=HOST, port=PORT, reload=DEBUG)
