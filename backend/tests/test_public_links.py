import re
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from workshop.core.errors import Denied, LinkCreationFailed, NotFound
from workshop.crud import links as links_crud
from workshop.db.models.public_link import PublicLink
from workshop.services.links import get_or_create_link, deactivate_link, public_url

TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{22,}$")


def _active(db, resource_type, resource_id):
    return (
        db.query(PublicLink)
        .filter_by(resource_type=resource_type, resource_id=resource_id, is_active=True)
        .count()
    )

def test_issuing_is_idempotent(db, mechanic, make_checklist):
    c = make_checklist(mechanic)
    first = get_or_create_link(db, mechanic, "checklist", c.id)
    second = get_or_create_link(db, mechanic, "checklist", c.id)
    assert first.token == second.token
    assert TOKEN_RE.match(first.token)
    assert _active(db, "checklist", c.id) == 1

def test_each_resource_gets_its_own_token(db, admin, mechanic, make_checklist, make_budget):
    c = make_checklist(mechanic)
    b = make_budget(mechanic)
    t1 = get_or_create_link(db, admin, "checklist", c.id).token
    t2 = get_or_create_link(db, admin, "budget", b.id).token
    assert t1 != t2

def test_deactivate_then_reissue_gives_new_token(db, admin, mechanic, make_checklist):
    c = make_checklist(mechanic)
    old = get_or_create_link(db, admin, "checklist", c.id).token
    assert deactivate_link(db, admin, "checklist", c.id) == 1
    assert deactivate_link(db, admin, "checklist", c.id) == 0
    new = get_or_create_link(db, admin, "checklist", c.id).token
    assert new != old
    # old row kept, inactive
    assert db.query(PublicLink).filter_by(resource_id=c.id).count() == 2
    assert _active(db, "checklist", c.id) == 1

def test_concurrent_issuers_share_one_link(session_factory, db, admin, mechanic, make_checklist):
    c = make_checklist(mechanic)

    def issue(_):
        s = session_factory()
        try:
            return get_or_create_link(s, admin, "checklist", c.id).token
        finally:
            s.close()

    with ThreadPoolExecutor(max_workers=8) as ex:
        tokens = list(ex.map(issue, range(16)))
    assert len(set(tokens)) == 1
    assert _active(db, "checklist", c.id) == 1

def test_store_rejects_second_active_link(db, admin, mechanic, make_checklist):
    c = make_checklist(mechanic)
    get_or_create_link(db, admin, "checklist", c.id)
    db.add(PublicLink(token="manual-token", resource_type="checklist", resource_id=c.id, is_active=True))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
    # inactive duplicates are fine
    db.add(PublicLink(token="old-token", resource_type="checklist", resource_id=c.id, is_active=False))
    db.commit()

def test_only_owner_or_admin_may_share(db, mechanic, other_mechanic, make_checklist):
    c = make_checklist(mechanic)
    with pytest.raises(Denied):
        get_or_create_link(db, other_mechanic, "checklist", c.id)
    with pytest.raises(Denied):
        deactivate_link(db, other_mechanic, "checklist", c.id)
    assert _active(db, "checklist", c.id) == 0

def test_unknown_type_or_resource(db, admin):
    with pytest.raises(NotFound):
        get_or_create_link(db, admin, "invoice", 1)
    with pytest.raises(NotFound):
        get_or_create_link(db, admin, "budget", 999)

def test_store_failure_surfaces_as_link_creation_failed(db, admin, mechanic, make_checklist, monkeypatch):
    c = make_checklist(mechanic)

    def boom(*a, **kw):
        raise OperationalError("INSERT", {}, Exception("timeout"))

    monkeypatch.setattr(links_crud, "get_or_create_active_link", boom)
    with pytest.raises(LinkCreationFailed) as e:
        get_or_create_link(db, admin, "checklist", c.id)
    assert e.value.status_code == 503
    assert _active(db, "checklist", c.id) == 0

def test_public_url(monkeypatch):
    from workshop.core.config import settings
    monkeypatch.setattr(settings, "PUBLIC_BASE_URL", "https://oficina.example/")
    assert public_url("budget", "abc") == "https://oficina.example/public/budget/abc"

def test_failed_issue_does_not_log_the_token(db, admin, mechanic, make_checklist, monkeypatch):
    from workshop.services import links as links_service

    c = make_checklist(mechanic)
    monkeypatch.setattr(links_service, "new_public_token", lambda: "secret-token-value")

    def boom(db, resource_type, resource_id, token, created_by):
        raise OperationalError("INSERT INTO public_link", (token,), Exception("timeout"))

    logged = []

    class _Recorder:
        def error(self, event, **kw):
            logged.append((event, kw))

        info = error

    monkeypatch.setattr(links_crud, "get_or_create_active_link", boom)
    monkeypatch.setattr(links_service, "logger", _Recorder())
    with pytest.raises(LinkCreationFailed):
        get_or_create_link(db, admin, "checklist", c.id)
    assert logged == [("public_link_failed", {"resource_type": "checklist", "resource_id": c.id, "error": "OperationalError"})]
    assert "secret-token-value" not in repr(logged)

def test_unsupported_dialect_is_a_link_failure(db, admin, mechanic, make_checklist, monkeypatch):
    c = make_checklist(mechanic)
    monkeypatch.setattr(links_crud, "_INSERTS", {})
    with pytest.raises(LinkCreationFailed):
        get_or_create_link(db, admin, "checklist", c.id)
    assert _active(db, "checklist", c.id) == 0
