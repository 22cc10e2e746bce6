import pytest

from formhost.core.config import settings
from formhost.core.errors import FieldLimitExceeded, FieldValidationError, InvalidInput
from formhost.core.field_validation import (
    DEFAULT_CATEGORY,
    sanitize_field,
    sanitize_fields,
    sanitize_html,
    split_options,
    validate_category,
    validate_fields,
    validate_fields_or_raise,
    validate_title,
)
from tests.helpers import field


def test_sanitize_strips_markup_and_handlers():
    out = sanitize_field({
        "type": "singleLine",
        "label": '  <b>Name</b><script>alert(1)</script> ',
        "placeholder": '<img src=x onerror=alert(1)>Your name',
        "name": "full\x00_name\n",
    })
    assert out["label"] == "Name"
    assert out["placeholder"] == "Your name"
    assert out["name"] == "full_name"


def test_sanitize_nested_fragments_do_not_reassemble():
    assert "<" not in sanitize_html("<<b>script>alert(1)<</b>/script>")
    assert "javascript:" not in sanitize_html("javajavascript:script:alert(1)").lower()


def test_options_normalized_from_list_or_string():
    from_list = sanitize_field({"type": "dropdown", "options": [" a ", "", "b", None, "c "]})
    from_str = sanitize_field({"type": "dropdown", "options": " a ,, b,c , "})
    assert from_list["options"] == "a, b, c"
    assert from_str["options"] == "a, b, c"


def test_options_removed_for_non_option_types():
    out = sanitize_field({"type": "email", "options": "x, y"})
    assert "options" not in out


def test_transient_editor_flag_dropped():
    out = sanitize_field({"type": "singleLine", "name": "a", "label": "A", "autoName": True})
    assert "autoName" not in out


def test_sanitize_is_a_fixed_point():
    raw = [
        {"type": "checkboxes", "label": " <i>Pick</i> ", "name": " pick ", "options": ["<b>x</b>", " y", ""],
         "required": 1, "autoName": True},
        {"type": "paragraph", "label": "Bio", "name": "bio", "options": "junk", "placeholder": "<p>Tell us</p>"},
        {"type": "dropdown", "label": "Size", "name": "size", "options": "S,M,,L"},
    ]
    once = sanitize_fields(raw)
    assert sanitize_fields(once) == once


def test_split_options():
    assert split_options(None) == []
    assert split_options("a, b ,,c") == ["a", "b", "c"]
    assert split_options(["a,b", "c"]) == ["a", "b", "c"]


def test_duplicate_names_rejected_regardless_of_type_and_label():
    _, errors = validate_fields([
        field("email", "email", label="Work email"),
        field("email", "singleLine", label="Other"),
    ])
    assert any("Duplicate field name 'email'" in e for e in errors)


def test_duplicate_names_compared_after_trim():
    clean, errors = validate_fields([field("code"), {**field("code"), "name": " code "}])
    assert clean[1]["name"] == "code"
    assert errors == ["Field 2: Duplicate field name 'code'; names must be unique within a form"]


@pytest.mark.parametrize("ftype", ["dropdown", "multipleChoice", "checkboxes"])
@pytest.mark.parametrize("options", ["", " , ,", [], None])
def test_option_types_need_a_token(ftype, options):
    _, errors = validate_fields([field("choice", ftype, options=options)])
    assert errors == ["Field 1: Options are required for this field type"]


def test_data_source_satisfies_options_only_in_builder_path():
    f = field("city", "dropdown", options="", dataSource="cities")
    assert validate_fields([f], allow_data_source=True)[1] == []
    assert validate_fields([f])[1] == ["Field 1: Options are required for this field type"]


def test_option_rules():
    many = ",".join(f"o{i}" for i in range(settings.MAX_OPTIONS_COUNT + 1))
    _, errors = validate_fields([
        field("a", "dropdown", options=many),
        field("b", "dropdown", options="x, x"),
    ])
    assert errors == [
        f"Field 1: Maximum {settings.MAX_OPTIONS_COUNT} options allowed",
        "Field 2: Duplicate options are not allowed",
    ]


def test_every_error_reported_with_position():
    _, errors = validate_fields([
        {"type": "singleLine", "label": "", "name": ""},
        {"type": "bogus", "label": "L", "name": "1bad"},
        {"type": "singleLine", "label": "x" * 256, "name": "ok", "placeholder": "p" * 256},
    ])
    assert "Field 1: Field label is required" in errors
    assert "Field 1: Field name is required" in errors
    assert any(e.startswith("Field 2: Field name must start with a letter") for e in errors)
    assert "Field 2: Unsupported field type: 'bogus'" in errors
    assert "Field 3: Field label must be no more than 255 characters long" in errors
    assert "Field 3: Placeholder must be no more than 255 characters long" in errors


def test_validate_or_raise_returns_clean_fields():
    clean = validate_fields_or_raise([field("size", "dropdown", options=["S", "M"], autoName=True)])
    assert clean[0]["options"] == "S, M"
    assert "autoName" not in clean[0]


def test_validate_or_raise_aggregates():
    with pytest.raises(FieldValidationError) as exc:
        validate_fields_or_raise([field("x"), field("x")])
    assert exc.value.status_code == 400
    assert exc.value.detail["message"] == "Field validation failed"
    assert exc.value.detail["errors"]


def test_field_limit_checked_first():
    too_many = [{"bad": True}] * (settings.MAX_FIELDS + 1)
    with pytest.raises(FieldLimitExceeded) as exc:
        validate_fields_or_raise(too_many)
    assert exc.value.status_code == 413
    assert exc.value.detail == {
        "message": "Too many fields",
        "limit": settings.MAX_FIELDS,
        "received": settings.MAX_FIELDS + 1,
    }


def test_fields_must_be_list_of_objects():
    with pytest.raises(InvalidInput):
        validate_fields_or_raise("nope")
    with pytest.raises(InvalidInput):
        validate_fields_or_raise(["nope"])
    assert validate_fields_or_raise(None) == []


def test_title_and_category_rules():
    assert validate_title("  Hello ") == "Hello"
    with pytest.raises(InvalidInput):
        validate_title("   ")
    with pytest.raises(InvalidInput):
        validate_title("t" * 256)
    assert validate_category("") == DEFAULT_CATEGORY
    assert validate_category("quiz") == "quiz"
    with pytest.raises(InvalidInput):
        validate_category("poll")


@pytest.mark.parametrize("ftype", [["dropdown"], {"kind": "dropdown"}, 3, None])
def test_non_string_type_is_unsupported(ftype):
    f = {"type": ftype, "label": "A", "name": "a", "options": "x, y"}
    cleaned = sanitize_field(f)
    assert "options" not in cleaned
    _, errors = validate_fields([f])
    assert errors == [f"Field 1: Unsupported field type: {ftype!r}"]


def test_non_string_type_is_a_400(client):
    r = client.post("/forms", json={"title": "T", "fields": [{"type": ["dropdown"], "label": "A", "name": "a"}]})
    assert r.status_code == 400
    assert r.json()["detail"]["errors"] == ["Field 1: Unsupported field type: ['dropdown']"]
