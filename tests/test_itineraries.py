"""
Tests for visitor itinerary planning.
"""

from datetime import timedelta


def itinerary_payload(experience, **overrides):
    payload = {
        "experience_id": experience.experience_id,
        "start_date": experience.start_date.isoformat(),
        "end_date": experience.end_date.isoformat(),
        "day": 1,
        "description": "Arrive early and grab dinner nearby",
    }
    payload.update(overrides)
    return payload


def test_store_and_list(client, auth_headers, experience):
    response = client.post("/api/v1/itineraries", json=itinerary_payload(experience), headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["experience_title"] == "Desert Stargazing"

    listing = client.get("/api/v1/itineraries", headers=auth_headers)
    assert len(listing.json()) == 1


def test_end_before_start_rejected(client, auth_headers, experience):
    payload = itinerary_payload(
        experience, end_date=(experience.start_date - timedelta(days=1)).isoformat()
    )
    response = client.post("/api/v1/itineraries", json=payload, headers=auth_headers)
    assert response.status_code == 422


def test_unknown_experience(client, auth_headers, experience):
    response = client.post(
        "/api/v1/itineraries", json=itinerary_payload(experience, experience_id=777), headers=auth_headers
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Experience not found."


def test_update_and_delete_own(client, auth_headers, experience):
    created = client.post("/api/v1/itineraries", json=itinerary_payload(experience), headers=auth_headers).json()

    updated = client.put(
        f"/api/v1/itineraries/{created['itinerary_id']}",
        json=itinerary_payload(experience, day=2, description="Second night"),
        headers=auth_headers,
    )
    assert updated.status_code == 200
    assert updated.json()["day"] == 2

    deleted = client.delete(f"/api/v1/itineraries/{created['itinerary_id']}", headers=auth_headers)
    assert deleted.status_code == 200
    assert client.get("/api/v1/itineraries", headers=auth_headers).json() == []


def test_cannot_touch_other_visitors_itinerary(client, auth_headers, other_headers, experience):
    created = client.post("/api/v1/itineraries", json=itinerary_payload(experience), headers=auth_headers).json()

    response = client.delete(f"/api/v1/itineraries/{created['itinerary_id']}", headers=other_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Itinerary not found."
