"""
UI components for the intake app.

Server-rendered FastHTML fragments. Interactive behaviour (uploader
preview, passkey modal, deferred theming) is HTMX round trips back to
the routes in app/main.py.
"""

import base64

from fasthtml.common import *

from core import fields
from core.config import PASSKEY_LENGTH
from core.intake import UploadedFile
from core.passkey import AccessGate

INPUT_CLS = (
    "w-full p-2 rounded bg-slate-800 text-white border border-slate-600 "
    "placeholder-slate-500 focus:ring-2 focus:ring-emerald-500 focus:border-transparent"
)
LABEL_CLS = "block text-sm mb-1 text-slate-300"
ERROR_CLS = "text-red-400 text-sm mt-1"


# =============================================================================
# FEEDBACK
# =============================================================================

def toast_container() -> Div:
    return Div(
        id="toast-container",
        cls="fixed top-4 right-4 z-50 flex flex-col gap-2"
    )


def toast(message: str, variant: str = "info") -> Div:
    """
    Single toast notification.
    Variants: success, error, warning, info
    """
    colors = {
        "success": "bg-emerald-600 text-white",
        "error": "bg-red-600 text-white",
        "warning": "bg-amber-500 text-white",
        "info": "bg-slate-700 text-white",
    }
    icons = {
        "success": "✓",
        "error": "✗",
        "warning": "⚠",
        "info": "ℹ",
    }
    return Div(
        Span(icons.get(variant, ""), cls="mr-2"),
        Span(message),
        cls=f"px-4 py-3 rounded shadow-lg flex items-center {colors.get(variant, colors['info'])}",
        **{"_": "on load wait 4s then remove me"}
    )


def submit_button(label: str, is_loading: bool = False) -> Button:
    """Primary submit button. Shows a loading label while a submission is in flight."""
    return Button(
        Span("Loading..." if is_loading else label),
        Span("⏳", cls="htmx-indicator animate-pulse"),
        type="submit",
        disabled=is_loading,
        cls="w-full p-3 bg-emerald-600 hover:bg-emerald-700 rounded text-white font-medium "
            "disabled:opacity-60 flex justify-center items-center gap-2",
    )


# =============================================================================
# FORM FIELDS
# =============================================================================

def _text_input(field: fields.TextInput, value, error):
    if field.icon:
        return Div(
            Span(field.icon, cls="absolute left-3 top-1/2 -translate-y-1/2 text-slate-400"),
            Input(type=field.input_type, name=field.name, id=field.name,
                  value=value or "", placeholder=field.placeholder, cls=f"{INPUT_CLS} pl-9"),
            cls="relative",
        )
    return Input(
        type=field.input_type, name=field.name, id=field.name,
        value=value or "", placeholder=field.placeholder, cls=INPUT_CLS,
    )


def _phone_input(field: fields.PhoneInput, value, error):
    return Input(
        type="tel", name=field.name, id=field.name, value=value or "",
        placeholder=field.placeholder, autocomplete="tel", cls=INPUT_CLS,
    )


def _date_picker(field: fields.DatePicker, value, error):
    if hasattr(value, "isoformat"):
        value = value.isoformat()
    return Input(type="date", name=field.name, id=field.name, value=value or "", cls=INPUT_CLS)


def _select(field: fields.Select, value, error):
    return Select(
        Option(field.placeholder, value="", disabled=True, selected=not value),
        *[Option(o.label, value=o.value, selected=(o.value == value)) for o in field.options],
        name=field.name, id=field.name, cls=INPUT_CLS,
    )


def _choice_group(field: fields.ChoiceGroup, value, error):
    return Div(
        *[
            Div(
                Input(type="radio", name=field.name, id=f"{field.name}-{option}",
                      value=option, checked=(option == value)),
                Label(option, fr=f"{field.name}-{option}", cls="cursor-pointer text-slate-200"),
                cls="flex items-center gap-2 px-3 py-2 rounded border border-dashed border-slate-600",
            )
            for option in field.options
        ],
        cls="flex h-11 gap-6 xl:justify-between",
    )


def _document_upload(field: fields.DocumentUpload, value, error):
    return FileUploader(files=value or None, name=field.name).render()


def _text_area(field: fields.TextArea, value, error):
    return Textarea(
        value or "", name=field.name, id=field.name,
        placeholder=field.placeholder, rows=3, cls=INPUT_CLS,
    )


def _checkbox(field: fields.Checkbox, value, error):
    return Div(
        Input(type="checkbox", name=field.name, id=field.name, checked=bool(value),
              cls="h-4 w-4 accent-emerald-500"),
        Label(field.label, fr=field.name, cls="cursor-pointer text-sm text-slate-300"),
        cls="flex items-center gap-3",
    )


_RENDERERS = {
    fields.TextInput: _text_input,
    fields.PhoneInput: _phone_input,
    fields.DatePicker: _date_picker,
    fields.Select: _select,
    fields.ChoiceGroup: _choice_group,
    fields.DocumentUpload: _document_upload,
    fields.TextArea: _text_area,
    fields.Checkbox: _checkbox,
}


def render_field(field, value=None, error: str | None = None) -> Div:
    """
    Render one form field: label, control and inline error.

    Dispatches on the descriptor's type. Checkboxes carry their label
    beside the control instead of above it.
    """
    renderer = _RENDERERS.get(type(field))
    if renderer is None:
        raise TypeError(f"No renderer for field kind {type(field).__name__}")

    label = None
    if not isinstance(field, fields.Checkbox):
        label = Label(field.label, fr=field.name, cls=LABEL_CLS)

    return Div(
        label,
        renderer(field, value, error),
        P(error, cls=ERROR_CLS, id=f"{field.name}-error") if error else None,
        cls="flex-1 space-y-1",
    )


def form_section(section: fields.FormSection, values: dict, errors: dict) -> Section:
    rows = [
        Div(
            *[render_field(f, values.get(f.name), errors.get(f.name)) for f in row],
            cls="flex flex-col gap-6 xl:flex-row",
        )
        for row in section.rows
    ]
    return Section(
        H2(section.title, cls="text-xl font-bold text-white mb-6"),
        Div(*rows, cls="space-y-6"),
        cls="mb-12",
    )


# =============================================================================
# DOCUMENT UPLOADER
# =============================================================================

def file_to_url(uploaded: UploadedFile) -> str:
    encoded = base64.b64encode(uploaded.content).decode("ascii")
    return f"data:{uploaded.content_type};base64,{encoded}"


def file_preview(files: list[UploadedFile] | None) -> Div:
    """
    Preview of the first file, or the upload prompt when there is none.
    Later files in the list are never shown.
    """
    if files:
        return Div(
            Img(src=file_to_url(files[0]), alt="Uploaded image",
                cls="max-h-[400px] overflow-hidden object-cover mx-auto"),
            cls="file-upload-preview",
        )
    return Div(
        Span("↑", cls="text-4xl text-slate-500"),
        P(
            Span("Click to upload", cls="text-emerald-500"),
            " or drag and drop",
            cls="text-slate-400 text-sm mt-2",
        ),
        # Descriptive only; nothing here enforces format or size
        P("SVG, PNG, JPG or GIF (max 800x400)", cls="text-xs text-slate-500 mt-1"),
        cls="text-center py-8",
    )


class FileUploader:
    """
    Drag-and-drop or click-to-pick uploader for a single image.

    Holds no file state of its own: the caller passes the current files
    in and receives every new selection through on_change. Each drop
    replaces the previous selection.
    """

    def __init__(
        self,
        files: list[UploadedFile] | None = None,
        on_change=None,
        name: str = "identificationDocument",
        preview_url: str = "/uploads/preview",
    ):
        self.files = files
        self.on_change = on_change
        self.name = name
        self.preview_url = preview_url

    def drop(self, accepted: list[UploadedFile]) -> None:
        if self.on_change:
            self.on_change(list(accepted))

    def render(self) -> Div:
        preview_id = f"{self.name}-preview"
        return Div(
            # Stretched over the drop zone, so both dropping and clicking land on it.
            # hx-preserve keeps the chosen file when the surrounding form is re-rendered.
            Input(
                type="file",
                name=self.name,
                id=f"{self.name}-input",
                accept="image/*",
                cls="absolute inset-0 opacity-0 cursor-pointer",
                hx_post=self.preview_url,
                hx_trigger="change",
                hx_encoding="multipart/form-data",
                hx_params=self.name,
                hx_target=f"#{preview_id}",
                hx_swap="innerHTML",
                hx_preserve=True,
            ),
            Div(file_preview(self.files), id=preview_id),
            cls="file-upload relative border-2 border-dashed border-slate-600 rounded-lg p-4 "
                "hover:border-slate-500 hover:bg-slate-800 transition-colors",
        )


# =============================================================================
# PASSKEY MODAL
# =============================================================================

PASSKEY_SLOT_SCRIPT = """
    document.body.addEventListener('input', function(evt) {
        var slot = evt.target;
        if (!slot.classList.contains('passkey-slot')) return;
        if (slot.value.length === 1 && slot.nextElementSibling) {
            slot.nextElementSibling.focus();
        }
    });
"""


def passkey_modal(
    gate: AccessGate,
    action: str = "/admin/passkey",
    close_url: str = "/admin/passkey/close",
) -> Div:
    """
    Admin passkey prompt.

    Visible while the gate is open. The backdrop does not dismiss it;
    only the close button does, which leaves for the public route.
    """
    slots = [
        Input(
            type="text", name=f"passkey_{i}", maxlength="1", inputmode="numeric",
            autocomplete="off", aria_label=f"Passkey digit {i + 1}",
            cls="passkey-slot w-12 h-14 text-center text-2xl font-bold rounded "
                "bg-slate-900 text-white border border-slate-600",
        )
        for i in range(PASSKEY_LENGTH)
    ]
    return Div(
        Div(cls="absolute inset-0 bg-black/80"),
        Div(
            Div(
                H2("Admin Access Verification", cls="text-xl font-bold text-white"),
                Button(
                    "X",
                    cls="text-slate-400 hover:text-white text-xl font-bold",
                    hx_post=close_url,
                    type="button",
                    aria_label="Close",
                ),
                cls="flex justify-between items-start mb-2",
            ),
            P("To access the admin page, please enter the passkey.", cls="text-slate-400 mb-6 text-sm"),
            Form(
                Div(*slots, cls="flex justify-between gap-2"),
                P(gate.error, id="passkey-error", cls="text-red-400 text-sm mt-4 text-center") if gate.error else None,
                Button(
                    "Enter Admin Passkey",
                    type="submit",
                    cls="w-full mt-6 p-2 bg-emerald-600 hover:bg-emerald-700 rounded text-white font-medium",
                ),
                hx_post=action,
                hx_target="#passkey-modal",
                hx_swap="outerHTML",
            ),
            Script(PASSKEY_SLOT_SCRIPT),
            cls="bg-slate-800 rounded-lg shadow-2xl max-w-md w-full p-8 relative border border-slate-700",
        ),
        id="passkey-modal",
        role="alertdialog",
        cls="fixed inset-0 flex items-center justify-center p-4 z-[9998]"
            + ("" if gate.is_open else " hidden"),
    )


# =============================================================================
# THEME HOST
# =============================================================================

THEME_HOST_ID = "theme-host"


def theme_host(*children, theme: str = "dark", ready: bool = False, ready_url: str = "") -> Div:
    """
    Two-phase themed container.

    Phase 1 (ready=False) renders an empty neutral placeholder that asks
    for phase 2 once the page has loaded in the browser. Phase 2 renders
    the children inside the resolved scheme. Nothing themed is sent
    before the client is ready, so light and dark never flash.
    """
    if not ready:
        return Div(
            id=THEME_HOST_ID,
            hx_get=ready_url,
            hx_trigger="load",
            hx_swap="outerHTML",
            cls="min-h-screen",
        )
    palette = "bg-slate-950 text-white" if theme == "dark" else "bg-white text-slate-900"
    return Div(
        *children,
        id=THEME_HOST_ID,
        data_theme=theme,
        cls=f"{theme} min-h-screen {palette}",
    )
