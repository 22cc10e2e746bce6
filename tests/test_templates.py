import re

from formhost.core.uniqueness import TEMPLATE_NAME_TAKEN
from formhost.models.audit_event import AuditEvent
from formhost.models.form import Form
from formhost.models.template import Template
from formhost.services.forms import form_fields
from tests.helpers import create_category, create_form, field


def _create(client, name="Contact template", **extra):
    payload = {"name": name, "description": "Reusable", "fields": [field("email", "email"), field("topic", "dropdown")]}
    payload.update(extra)
    return client.post("/templates", json=payload)


def test_create_template(client, db_session):
    r = _create(client)
    assert r.status_code == 200
    body = r.json()
    assert re.fullmatch(r"template-[A-Za-z0-9]{8}", body["id"])
    assert [f["name"] for f in body["fields"]] == ["email", "topic"]
    assert body["fields"][1]["options"] == "Red, Green, Blue"
    assert body["is_active"] is True
    assert body["category"] is None


def test_template_name_conflicts_case_insensitively(client):
    assert _create(client, name="Signup").status_code == 200
    r = _create(client, name="  SIGNUP ")
    assert r.status_code == 409
    assert r.json()["detail"] == TEMPLATE_NAME_TAKEN


def test_template_name_required(client):
    r = _create(client, name=" ")
    assert r.status_code == 400
    assert r.json()["detail"]["message"] == "Template name is required."


def test_template_fields_validated(client, db_session):
    r = _create(client, fields=[field("a"), field("a")])
    assert r.status_code == 400
    assert db_session.query(Template).count() == 0


def test_check_name(client):
    tid = _create(client, name="Checked").json()["id"]
    assert client.get("/templates/check-name", params={"name": "checked"}).json() == {"unique": False}
    assert client.get("/templates/check-name", params={"name": "checked", "exclude_id": tid}).json() == {"unique": True}
    assert client.get("/templates/check-name", params={"name": "other"}).json() == {"unique": True}


def test_partial_update_touches_only_supplied_keys(client):
    created = _create(client).json()

    r = client.put(f"/templates/{created['id']}", json={"description": "New words"})
    assert r.status_code == 200
    body = r.json()
    assert body["description"] == "New words"
    assert body["name"] == created["name"]
    assert body["fields"] == created["fields"]

    r = client.put(f"/templates/{created['id']}", json={"fields": [field("only")]})
    assert [f["name"] for f in r.json()["fields"]] == ["only"]
    assert r.json()["description"] == "New words"


def test_update_template_conflict_and_404(client):
    _create(client, name="One")
    two = _create(client, name="Two").json()
    assert client.put(f"/templates/{two['id']}", json={"name": "one"}).status_code == 409
    assert client.put("/templates/template-00000000", json={"name": "x"}).status_code == 404


def test_template_category_link(client, db_session):
    cat = create_category(db_session, name="Events", color="#abcdef")
    r = _create(client, category_id=cat.id)
    assert r.json()["category"] == {"id": cat.id, "name": "Events", "color": "#abcdef"}

    r = _create(client, name="Bad cat", category_id="category-missing0")
    assert r.status_code == 400


def test_list_and_delete_templates(client, db_session):
    a = _create(client, name="Alpha").json()
    b = _create(client, name="Beta").json()
    client.put(f"/templates/{b['id']}", json={"is_active": False})

    assert {t["name"] for t in client.get("/templates").json()} == {"Alpha", "Beta"}
    assert [t["name"] for t in client.get("/templates", params={"active_only": True}).json()] == ["Alpha"]

    assert client.delete(f"/templates/{a['id']}").status_code == 200
    assert client.delete(f"/templates/{a['id']}").status_code == 404
    assert client.get(f"/templates/{a['id']}").status_code == 404

    actions = sorted(e.action for e in db_session.query(AuditEvent).filter(AuditEvent.entity_id == a["id"]))
    assert actions == ["TEMPLATE_CREATED", "TEMPLATE_DELETED"]


def test_form_from_template_copies_fields(client, db_session):
    cat = create_category(db_session)
    template = _create(client, category_id=cat.id).json()

    r = client.post(f"/forms/from-template/{template['id']}", json={"title": "Copied"})
    assert r.status_code == 200
    form = db_session.get(Form, r.json()["id"])
    assert form.category_id == cat.id
    assert [f.name for f in form_fields(form)] == ["email", "topic"]

    # the template is not linked to the new form
    client.put(f"/templates/{template['id']}", json={"fields": [field("changed")]})
    db_session.expire_all()
    assert [f.name for f in form_fields(db_session.get(Form, form.id))] == ["email", "topic"]


def test_form_from_missing_template(client):
    r = client.post("/forms/from-template/template-00000000", json={"title": "x"})
    assert r.status_code == 404


def test_form_from_template_respects_title_uniqueness(client, db_session):
    create_form(db_session, title="Copied")
    template = _create(client).json()
    r = client.post(f"/forms/from-template/{template['id']}", json={"title": "copied"})
    assert r.status_code == 409


def test_get_template_service(client, db_session):
    from formhost.services.templates import get_template

    tid = _create(client).json()["id"]
    assert get_template(db_session, tid).name == "Contact template"
    assert get_template(db_session, "template-00000000") is None
