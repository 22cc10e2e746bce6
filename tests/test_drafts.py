import pytest

from formhost.core.uniqueness import FORM_TITLE_TAKEN
from formhost.models.form import Form
from formhost.models.form_draft import FormDraft
from formhost.models.form_version import FormVersion
from formhost.services.forms import form_fields
from formhost.services.versioning import cleanup_old_drafts, list_drafts, save_draft
from tests.helpers import age_draft, create_form, create_user, field


def test_save_draft_upserts_per_form_and_author(db_session):
    form = create_form(db_session, title="Drafted")
    alice = create_user(db_session, "alice@test.com")
    bob = create_user(db_session, "bob@test.com")

    d1 = save_draft(db_session, form_id=form.id, author=alice, title="v1", fields=[field("a")])
    d2 = save_draft(db_session, form_id=form.id, author=alice, title="v2", fields=[field("b")])
    d3 = save_draft(db_session, form_id=form.id, author=bob, title="bob", fields=[])

    assert d1.id == d2.id
    assert d3.id != d1.id
    assert db_session.query(FormDraft).count() == 2
    assert db_session.get(FormDraft, d1.id).title == "v2"
    assert db_session.get(FormDraft, d1.id).fields_data[0]["name"] == "b"


def test_new_form_drafts_upsert_on_author(db_session):
    alice = create_user(db_session, "alice@test.com")
    a = save_draft(db_session, form_id=None, author=alice, title="Untitled")
    b = save_draft(db_session, form_id=None, author=alice, title="Untitled 2")
    assert a.id == b.id
    assert b.form_id is None


def test_draft_for_unknown_form(client):
    r = client.post("/drafts", json={"form_id": "form-00000000", "title": "x"})
    assert r.status_code == 404


def test_drafts_keep_invalid_work_in_progress(client):
    """Drafts are stored as sent; validation happens on publish"""
    r = client.post("/drafts", json={"title": "", "fields": [{"type": "dropdown", "name": "x"}]})
    assert r.status_code == 200
    assert r.json()["fields"] == [{"type": "dropdown", "name": "x"}]


def test_list_drafts_hides_auto_saves_by_default(client, db_session):
    save_draft(db_session, form_id=None, author=None, title="manual")
    form = create_form(db_session, title="Auto")
    save_draft(db_session, form_id=form.id, author=None, title="auto", is_auto_save=True)

    assert [d["title"] for d in client.get("/drafts").json()] == ["manual"]
    titles = {d["title"] for d in client.get("/drafts", params={"include_auto_save": True}).json()}
    assert titles == {"manual", "auto"}


def test_drafts_are_private_to_author(db_session):
    alice = create_user(db_session, "alice@test.com")
    bob = create_user(db_session, "bob@test.com")
    save_draft(db_session, form_id=None, author=alice, title="mine")
    assert list_drafts(db_session, bob) == []


def test_publish_draft_creates_form_and_first_version(client, db_session):
    draft = client.post("/drafts", json={
        "title": "From draft",
        "fields": [field("email", "email"), field("size", "dropdown", options=["S", "M"])],
    }).json()

    r = client.post(f"/drafts/{draft['id']}/publish")
    assert r.status_code == 200
    body = r.json()

    form = db_session.get(Form, body["form_id"])
    assert form.title == "From draft"
    assert form.is_published is True
    assert form.current_version_number == 1
    assert form.last_published_version_id == body["version"]["id"]
    assert [f.name for f in form_fields(form)] == ["email", "size"]
    assert form_fields(form)[1].options == "S, M"

    v = db_session.get(FormVersion, body["version"]["id"])
    assert v.version_number == 1
    assert v.is_published is True
    assert v.change_description == "Initial version from draft"

    assert db_session.get(FormDraft, draft["id"]) is None
    assert client.get(f"/drafts/{draft['id']}").status_code == 404


def test_publish_invalid_draft_keeps_draft(client, db_session):
    draft = client.post("/drafts", json={"title": "Broken", "fields": [field("a"), field("a")]}).json()
    r = client.post(f"/drafts/{draft['id']}/publish")
    assert r.status_code == 400
    assert db_session.query(Form).count() == 0
    assert db_session.get(FormDraft, draft["id"]) is not None


def test_publish_draft_title_conflict(client, db_session):
    create_form(db_session, title="Taken")
    draft = client.post("/drafts", json={"title": "TAKEN", "fields": []}).json()
    r = client.post(f"/drafts/{draft['id']}/publish")
    assert r.status_code == 409
    assert r.json()["detail"] == FORM_TITLE_TAKEN


def test_delete_draft(client, db_session):
    draft = client.post("/drafts", json={"title": "bye"}).json()
    assert client.delete(f"/drafts/{draft['id']}").status_code == 200
    assert client.delete(f"/drafts/{draft['id']}").status_code == 404


def test_cleanup_old_drafts(db_session):
    alice = create_user(db_session, "alice@test.com")
    bob = create_user(db_session, "bob@test.com")
    old = save_draft(db_session, form_id=None, author=alice, title="old")
    fresh = save_draft(db_session, form_id=None, author=bob, title="fresh")
    age_draft(db_session, old, days=45)

    assert cleanup_old_drafts(db_session, 30) == 1
    assert db_session.query(FormDraft).filter(FormDraft.id == fresh.id).count() == 1
    assert db_session.query(FormDraft).filter(FormDraft.id == old.id).count() == 0
    assert cleanup_old_drafts(db_session, 30) == 0


def test_cleanup_script(db_session, monkeypatch):
    from scripts import cleanup_drafts

    old = save_draft(db_session, form_id=None, author=None, title="old")
    age_draft(db_session, old, days=90)
    monkeypatch.setattr(cleanup_drafts, "SessionLocal", lambda: db_session)
    monkeypatch.setattr(db_session, "close", lambda: None)

    assert cleanup_drafts.main(["--days", "60"]) == 0
    assert db_session.query(FormDraft).count() == 0


def test_one_draft_per_key_is_enforced_by_the_database(db_session):
    from sqlalchemy.exc import IntegrityError

    from formhost.services.versioning import draft_key

    alice = create_user(db_session, "alice@test.com")
    save_draft(db_session, form_id=None, author=alice, title="first")

    db_session.add(FormDraft(
        id="dup-draft",
        form_id=None,
        draft_key=draft_key(None, alice.id),
        created_by=alice.id,
        fields_data=[],
    ))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()
    assert db_session.query(FormDraft).count() == 1


def test_concurrent_first_save_becomes_update(db_session, monkeypatch):
    from formhost.services import versioning

    alice = create_user(db_session, "alice@test.com")
    first_id = save_draft(db_session, form_id=None, author=alice, title="first").id

    real_find = versioning._find_draft
    calls = []

    def missed_then_found(db, key):
        # the first lookup misses the row another request just committed
        calls.append(key)
        return None if len(calls) == 1 else real_find(db, key)

    monkeypatch.setattr(versioning, "_find_draft", missed_then_found)
    second = save_draft(db_session, form_id=None, author=alice, title="second")

    assert len(calls) == 2
    assert second.id == first_id
    assert db_session.query(FormDraft).count() == 1
    assert db_session.get(FormDraft, first_id).title == "second"
