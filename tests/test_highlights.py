"""
Tests for highlight authorship, visitor posting and admin moderation.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from myplan.highlights.service import HighlightService, resolve_creator
from myplan.models import Highlight


def test_visitor_posts_highlight(client, auth_headers, visitor_user):
    response = client.post(
        "/api/v1/highlights",
        data={"title": "Sunset at the Edge", "content": "Worth the drive"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["author"] == {"kind": "Visitor", "visitor_id": visitor_user.visitor_id}
    assert data["created_by"] == "Sara Alqahtani"
    assert data["created_by_type"] == "Visitor"
    assert data["creator_badge"] == "bg-success"


def test_admin_posts_highlight(client, admin_headers, admin_user):
    response = client.post("/api/v1/admin/highlights", data={"title": "Season opening"}, headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["author"] == {"kind": "Admin", "admin_id": admin_user.admin_id}
    assert data["created_by"] == "Site Admin"
    assert data["created_by_email"] == "admin@example.com"


def test_unresolvable_author_is_unknown(db_session):
    highlight = Highlight(title="Orphan", visitor_id=9999)
    db_session.add(highlight)
    db_session.commit()

    assert resolve_creator(highlight) == ("Unknown", "Unknown", None)
    response = HighlightService(db_session).to_response(highlight)
    assert response.created_by == "Unknown"
    assert response.creator_badge == "bg-secondary"


def test_highlight_needs_exactly_one_author(db_session, visitor_user, admin_user):
    db_session.add(Highlight(title="Both", visitor_id=visitor_user.visitor_id, admin_id=admin_user.admin_id))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    db_session.add(Highlight(title="Neither"))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()


def test_visitor_updates_only_own_highlight(client, db_session, auth_headers, other_headers, visitor_user):
    highlight = Highlight(title="Mine", visitor_id=visitor_user.visitor_id)
    db_session.add(highlight)
    db_session.commit()

    denied = client.put(f"/api/v1/highlights/{highlight.highlight_id}", json={"title": "Hijack"}, headers=other_headers)
    assert denied.status_code == 404

    allowed = client.put(f"/api/v1/highlights/{highlight.highlight_id}", json={"title": "Still mine"}, headers=auth_headers)
    assert allowed.status_code == 200
    assert allowed.json()["title"] == "Still mine"


def test_update_rejects_null_title(client, db_session, auth_headers, visitor_user):
    highlight = Highlight(title="Dunes", visitor_id=visitor_user.visitor_id)
    db_session.add(highlight)
    db_session.commit()

    response = client.put(f"/api/v1/highlights/{highlight.highlight_id}", json={"title": None}, headers=auth_headers)
    assert response.status_code == 422
    db_session.refresh(highlight)
    assert highlight.title == "Dunes"


def test_admin_list_and_bulk_delete(client, db_session, admin_headers, visitor_user):
    ids = []
    for title in ("One", "Two"):
        highlight = Highlight(title=title, visitor_id=visitor_user.visitor_id)
        db_session.add(highlight)
        db_session.commit()
        ids.append(highlight.highlight_id)

    listing = client.get("/api/v1/admin/highlights", headers=admin_headers)
    assert len(listing.json()) == 2

    response = client.post("/api/v1/admin/highlights/bulk-delete", json={"ids": ids}, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["message"] == "2 highlight(s) deleted successfully!"
    assert db_session.query(Highlight).count() == 0


def test_bulk_delete_nothing_selected(client, admin_headers):
    response = client.post("/api/v1/admin/highlights/bulk-delete", json={"ids": []}, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["detail"] == "No highlights selected for deletion."


def test_admin_get_missing_highlight(client, admin_headers):
    response = client.get("/api/v1/admin/highlights/42", headers=admin_headers)
    assert response.status_code == 404
