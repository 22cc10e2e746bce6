from __future__ import annotations

import re

from formhost.core.config import settings
from formhost.core.errors import FieldLimitExceeded, FieldValidationError, InvalidInput

FIELD_TYPES = frozenset({
    "singleLine", "paragraph", "dropdown", "multipleChoice", "checkboxes",
    "number", "name", "email", "phone", "password", "date", "time",
    "datetime", "url", "file", "richText",
})

# Field types that carry a list of choices
OPTION_TYPES = frozenset({"dropdown", "multipleChoice", "checkboxes"})

FORM_CATEGORIES = ("survey", "quiz", "feedback", "registration", "contact")
DEFAULT_CATEGORY = "survey"

MAX_LABEL_LENGTH = 255
MAX_NAME_LENGTH = 64
MAX_PLACEHOLDER_LENGTH = 255
MAX_TITLE_LENGTH = 255

# Keys only the interactive editor uses; never persisted
TRANSIENT_KEYS = ("autoName",)

_SCRIPT_RE = re.compile(r"<script\b[^<]*(?:(?!</script>)<[^<]*)*</script>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")
_JS_PROTO_RE = re.compile(r"javascript:", re.IGNORECASE)
_HANDLER_RE = re.compile(r"on\w+\s*=", re.IGNORECASE)
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_NAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")


def sanitize_html(value):
    """Strip markup and inline handlers. Repeats until nothing changes so
    nested fragments like ``<<b>i>`` can't reassemble into a tag."""
    if not isinstance(value, str):
        return value
    prev = None
    out = value
    while out != prev:
        prev = out
        out = _SCRIPT_RE.sub("", out)
        out = _TAG_RE.sub("", out)
        out = _JS_PROTO_RE.sub("", out)
        out = _HANDLER_RE.sub("", out)
        out = out.strip()
    return out


def sanitize_name(value):
    if not isinstance(value, str):
        return value
    return _CONTROL_RE.sub("", value).strip()


def split_options(options) -> list[str]:
    """Accepts a list or a comma-delimited string; returns trimmed, non-empty tokens."""
    if options is None:
        return []
    if isinstance(options, (list, tuple)):
        raw = ",".join(str(o) for o in options if o is not None)
    else:
        raw = str(options)
    tokens = (sanitize_html(t.strip()) for t in raw.split(","))
    return [t for t in tokens if t]


def sanitize_field(field: dict) -> dict:
    cleaned = dict(field)

    if "label" in cleaned:
        cleaned["label"] = sanitize_html(cleaned["label"])
    if "placeholder" in cleaned:
        cleaned["placeholder"] = sanitize_html(cleaned["placeholder"])
    if "name" in cleaned:
        cleaned["name"] = sanitize_name(cleaned["name"])

    ftype = cleaned.get("type")
    if isinstance(ftype, str) and ftype in OPTION_TYPES:
        cleaned["options"] = ", ".join(split_options(cleaned.get("options")))
    else:
        cleaned.pop("options", None)

    for key in ("required", "doNotStore"):
        if key in cleaned:
            cleaned[key] = bool(cleaned[key])

    for key in TRANSIENT_KEYS:
        cleaned.pop(key, None)

    return cleaned


def sanitize_fields(fields: list[dict] | None) -> list[dict]:
    return [sanitize_field(f) for f in (fields or [])]


def _length_error(value, label: str, max_len: int) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return f"{label} is required"
    if not isinstance(value, str):
        return f"{label} must be a string"
    if len(value) > max_len:
        return f"{label} must be no more than {max_len} characters long"
    return None


def field_errors(field: dict, *, allow_data_source: bool = False) -> list[str]:
    """Every rule the (already sanitized) field violates, in a stable order."""
    errors: list[str] = []

    err = _length_error(field.get("label"), "Field label", MAX_LABEL_LENGTH)
    if err:
        errors.append(err)

    name = field.get("name")
    err = _length_error(name, "Field name", MAX_NAME_LENGTH)
    if err:
        errors.append(err)
    elif not _NAME_RE.match(name):
        errors.append("Field name must start with a letter and contain only letters, numbers, and underscores")

    placeholder = field.get("placeholder")
    if placeholder:
        if not isinstance(placeholder, str):
            errors.append("Placeholder must be a string")
        elif len(placeholder) > MAX_PLACEHOLDER_LENGTH:
            errors.append(f"Placeholder must be no more than {MAX_PLACEHOLDER_LENGTH} characters long")

    ftype = field.get("type")
    if not isinstance(ftype, str) or ftype not in FIELD_TYPES:
        errors.append(f"Unsupported field type: {ftype!r}")
        return errors

    if ftype in OPTION_TYPES:
        tokens = split_options(field.get("options"))
        data_source = field.get("dataSource")
        has_source = allow_data_source and isinstance(data_source, str) and data_source.strip()
        if not tokens:
            if not has_source:
                errors.append("Options are required for this field type")
        elif len(tokens) > settings.MAX_OPTIONS_COUNT:
            errors.append(f"Maximum {settings.MAX_OPTIONS_COUNT} options allowed")
        elif len(set(tokens)) != len(tokens):
            errors.append("Duplicate options are not allowed")
        elif len(field.get("options") or "") > settings.MAX_OPTIONS_LENGTH:
            errors.append(f"Options must be no more than {settings.MAX_OPTIONS_LENGTH} characters long")

    return errors


def duplicate_name_errors(fields: list[dict]) -> list[str]:
    seen: set[str] = set()
    errors: list[str] = []
    for idx, f in enumerate(fields, start=1):
        name = f.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        key = name.strip()
        if key in seen:
            errors.append(f"Field {idx}: Duplicate field name '{key}'; names must be unique within a form")
        seen.add(key)
    return errors


def validate_fields(fields: list[dict] | None, *, allow_data_source: bool = False) -> tuple[list[dict], list[str]]:
    """
    Sanitize then validate a raw field list.

    Returns (clean, errors). Errors are not short-circuited: every rule each
    field breaks is reported, prefixed with the field's 1-based position.
    """
    clean = sanitize_fields(fields)
    errors: list[str] = []
    for idx, field in enumerate(clean, start=1):
        for err in field_errors(field, allow_data_source=allow_data_source):
            errors.append(f"Field {idx}: {err}")
    errors.extend(duplicate_name_errors(clean))
    return clean, errors


def validate_fields_or_raise(fields, *, allow_data_source: bool = False) -> list[dict]:
    if fields is None:
        fields = []
    if not isinstance(fields, list):
        raise InvalidInput("fields must be an array")
    if len(fields) > settings.MAX_FIELDS:
        raise FieldLimitExceeded(settings.MAX_FIELDS, len(fields))
    if not all(isinstance(f, dict) for f in fields):
        raise InvalidInput("each field must be an object")

    clean, errors = validate_fields(fields, allow_data_source=allow_data_source)
    if errors:
        raise FieldValidationError(errors)
    return clean


def validate_title(title, what: str = "Form title") -> str:
    if not isinstance(title, str) or not title.strip():
        raise InvalidInput(f"{what} is required.")
    if len(title.strip()) > MAX_TITLE_LENGTH:
        raise InvalidInput(f"{what} must be no more than {MAX_TITLE_LENGTH} characters long")
    return title.strip()


def validate_category(category) -> str:
    if category is None or category == "":
        return DEFAULT_CATEGORY
    if category not in FORM_CATEGORIES:
        raise InvalidInput("Category must be one of: " + ", ".join(FORM_CATEGORIES))
    return category
