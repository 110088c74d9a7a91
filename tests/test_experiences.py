"""
Tests for admin experience management (multipart create/edit, delete, images).
"""

import json
import os
from datetime import date, timedelta

from myplan.config import settings
from myplan.models import Experience, ExperienceDetail, Image

START = date.today() + timedelta(days=20)


def form_data(**overrides):
    data = {
        "title": "Jeddah Food Tour",
        "description": "Street food crawl through Al-Balad",
        "type": "Food & Drink",
        "location": "Jeddah",
        "min_price": "80",
        "max_price": "120",
        "start_date": START.isoformat(),
        "end_date": (START + timedelta(days=2)).isoformat(),
        "max_capacity": "30",
        "details": json.dumps([
            {"date": START.isoformat(), "time": "18:00:00", "price": "80"},
            {"date": (START + timedelta(days=1)).isoformat(), "time": "18:00:00", "price": "120"},
        ]),
    }
    data.update(overrides)
    return data


def test_create_experience_with_details_and_image(client, db_session, admin_headers):
    response = client.post(
        "/api/v1/admin/experiences",
        data=form_data(),
        files=[("images", ("cover.png", b"fake-png-bytes", "image/png"))],
        headers=admin_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Jeddah Food Tour"
    assert len(data["details"]) == 2
    assert len(data["images"]) == 1
    assert data["type_badge"] == "bg-warning"

    stored = os.path.join(settings.UPLOAD_DIR, data["images"][0]["attachment"])
    assert os.path.exists(stored)


def test_create_experience_rejects_bad_image_type(client, db_session, admin_headers):
    response = client.post(
        "/api/v1/admin/experiences",
        data=form_data(),
        files=[("images", ("notes.txt", b"hello", "text/plain"))],
        headers=admin_headers,
    )
    assert response.status_code == 422
    # nothing half-written
    assert db_session.query(Experience).count() == 0
    assert db_session.query(ExperienceDetail).count() == 0


def test_create_experience_end_before_start(client, admin_headers):
    response = client.post(
        "/api/v1/admin/experiences",
        data=form_data(end_date=(START - timedelta(days=1)).isoformat()),
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_create_experience_bad_details_json(client, admin_headers):
    response = client.post(
        "/api/v1/admin/experiences",
        data=form_data(details="not-json"),
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_edit_keeps_existing_details(client, admin_headers, experience):
    """Editing appends new slots and never drops the existing ones."""
    existing = [
        {"experience_detail_id": d.experience_detail_id, "date": d.date.isoformat(), "price": "100"}
        for d in experience.details
    ]
    new_slot = {"date": (experience.start_date + timedelta(days=1)).isoformat(), "price": "90"}

    response = client.put(
        f"/api/v1/admin/experiences/{experience.experience_id}",
        data=form_data(
            title="Desert Stargazing Deluxe",
            start_date=experience.start_date.isoformat(),
            end_date=experience.end_date.isoformat(),
            details=json.dumps(existing + [new_slot]),
        ),
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Desert Stargazing Deluxe"
    assert len(data["details"]) == 3


def test_edit_with_no_details_keeps_slots(client, admin_headers, experience):
    response = client.put(
        f"/api/v1/admin/experiences/{experience.experience_id}",
        data=form_data(
            start_date=experience.start_date.isoformat(),
            end_date=experience.end_date.isoformat(),
            details="[]",
        ),
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert len(response.json()["details"]) == 2


def test_list_and_get(client, admin_headers, experience):
    listing = client.get("/api/v1/admin/experiences", headers=admin_headers)
    assert listing.status_code == 200
    assert listing.json()[0]["detail_count"] == 2

    detail = client.get(f"/api/v1/admin/experiences/{experience.experience_id}", headers=admin_headers)
    assert detail.status_code == 200
    assert detail.json()["max_capacity"] == 20


def test_get_missing_experience(client, admin_headers):
    response = client.get("/api/v1/admin/experiences/9999", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Experience not found."


def test_delete_experience_removes_slots_and_images(client, db_session, admin_headers, experience):
    db_session.add(Image(experience_id=experience.experience_id, attachment="experiences/missing.png"))
    db_session.commit()

    response = client.delete(f"/api/v1/admin/experiences/{experience.experience_id}", headers=admin_headers)
    assert response.status_code == 200
    assert db_session.query(Experience).count() == 0
    assert db_session.query(ExperienceDetail).count() == 0
    assert db_session.query(Image).count() == 0


def test_delete_image(client, db_session, admin_headers, experience):
    image = Image(experience_id=experience.experience_id, attachment="experiences/old.png")
    db_session.add(image)
    db_session.commit()

    response = client.delete(f"/api/v1/admin/experiences/images/{image.image_id}", headers=admin_headers)
    assert response.status_code == 200
    assert db_session.query(Image).count() == 0


def test_visitor_cannot_manage_experiences(client, auth_headers):
    assert client.get("/api/v1/admin/experiences", headers=auth_headers).status_code == 403
