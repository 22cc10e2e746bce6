import re

import pytest

from formhost.core import ids
from formhost.core.errors import IdGenerationExhausted
from formhost.core.ids import CategoryId, FormId, TemplateId, generate_unique_id, short_token
from formhost.models.form import Form
from tests.helpers import create_form


def test_short_token_alphabet_and_length():
    for _ in range(50):
        assert re.fullmatch(r"[A-Za-z0-9]{8}", short_token())


def test_prefixed_ids_validate_on_construction():
    assert FormId("form-abcDEF12") == "form-abcDEF12"
    assert isinstance(FormId.random(), str)
    with pytest.raises(ValueError):
        FormId("template-abcDEF12")
    with pytest.raises(ValueError):
        TemplateId("form-abcDEF12")
    with pytest.raises(ValueError):
        FormId("form-short")
    with pytest.raises(ValueError):
        CategoryId("category-abc_EF12")


def test_is_valid():
    assert TemplateId.is_valid("template-0000aaaa")
    assert not TemplateId.is_valid("template-0000aaa")
    assert not FormId.is_valid(None)


def test_generate_unique_id_retries_on_collision(db_session, monkeypatch):
    existing = create_form(db_session, title="Taken")
    fresh = "form-ZZZZ9999"
    draws = iter([existing.id, fresh])
    monkeypatch.setattr(FormId, "random", classmethod(lambda cls: cls(next(draws))))
    assert generate_unique_id(db_session, Form, FormId) == fresh


def test_generate_unique_id_gives_up_after_five(db_session, monkeypatch):
    existing = create_form(db_session, title="Taken")
    calls = []

    def always_taken(cls):
        calls.append(1)
        return cls(existing.id)

    monkeypatch.setattr(FormId, "random", classmethod(always_taken))
    with pytest.raises(IdGenerationExhausted) as exc:
        generate_unique_id(db_session, Form, FormId)
    assert len(calls) == ids.MAX_ATTEMPTS == 5
    assert exc.value.status_code == 500
