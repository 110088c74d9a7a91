"""
Tests for visitor reviews and admin review moderation.
"""

from datetime import datetime, timedelta

from myplan.models import Review


def add_review(db_session, visitor, experience, rating, comment="", days_ago=0):
    review = Review(
        visitor_id=visitor.visitor_id,
        experience_id=experience.experience_id,
        rating=rating,
        comment=comment,
        review_time=datetime.now() - timedelta(days=days_ago),
    )
    db_session.add(review)
    db_session.commit()
    db_session.refresh(review)
    return review


def test_visitor_creates_review(client, auth_headers, experience):
    response = client.post(
        "/api/v1/reviews",
        json={"experience_id": experience.experience_id, "rating": 4, "comment": "Loved it"},
        headers=auth_headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["rating_label"] == "Very Good"
    assert data["stars"] == "★★★★☆"
    assert data["visitor_name"] == "Sara Alqahtani"


def test_review_rating_out_of_range(client, auth_headers, experience):
    response = client.post(
        "/api/v1/reviews",
        json={"experience_id": experience.experience_id, "rating": 6},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_visitor_cannot_edit_others_review(client, db_session, other_headers, visitor_user, experience):
    review = add_review(db_session, visitor_user, experience, 3)
    response = client.put(f"/api/v1/reviews/{review.review_id}", json={"rating": 1}, headers=other_headers)
    assert response.status_code == 404


def test_update_rejects_null_rating(client, db_session, auth_headers, visitor_user, experience):
    review = add_review(db_session, visitor_user, experience, 4, comment="Fine")

    response = client.put(f"/api/v1/reviews/{review.review_id}", json={"rating": None}, headers=auth_headers)
    assert response.status_code == 422

    response = client.put(f"/api/v1/reviews/{review.review_id}", json={"comment": "Better"}, headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["rating"] == 4
    assert response.json()["comment"] == "Better"


def test_admin_list_filters_and_stats(client, db_session, admin_headers, visitor_user, other_visitor, experience):
    add_review(db_session, visitor_user, experience, 5, "Amazing night sky", days_ago=1)
    add_review(db_session, other_visitor, experience, 2, "Too cold", days_ago=3)

    response = client.get("/api/v1/admin/reviews", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert [r["rating"] for r in data["reviews"]] == [5, 2]
    assert data["stats"]["total"] == 2
    assert data["stats"]["average_rating"] == 3.5
    assert data["stats"]["rating_counts"]["5"] == 1
    assert data["stats"]["rating_counts"]["3"] == 0
    assert data["experience_types"] == ["Cultural"]

    by_rating = client.get("/api/v1/admin/reviews", params={"rating": 2}, headers=admin_headers).json()
    assert [r["comment"] for r in by_rating["reviews"]] == ["Too cold"]

    by_search = client.get("/api/v1/admin/reviews", params={"search": "omar"}, headers=admin_headers).json()
    assert [r["rating"] for r in by_search["reviews"]] == [2]

    oldest_first = client.get("/api/v1/admin/reviews", params={"sort_by": "date_asc"}, headers=admin_headers).json()
    assert [r["rating"] for r in oldest_first["reviews"]] == [2, 5]


def test_admin_date_filter_includes_whole_end_day(client, db_session, admin_headers, visitor_user, experience):
    add_review(db_session, visitor_user, experience, 4, days_ago=0)
    today = datetime.now().date().isoformat()

    response = client.get(
        "/api/v1/admin/reviews", params={"from_date": today, "to_date": today}, headers=admin_headers
    )
    assert len(response.json()["reviews"]) == 1


def test_bulk_delete(client, db_session, admin_headers, visitor_user, experience):
    first = add_review(db_session, visitor_user, experience, 5)
    second = add_review(db_session, visitor_user, experience, 4)

    response = client.post(
        "/api/v1/admin/reviews/bulk-delete",
        json={"ids": [first.review_id, second.review_id]},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["message"] == "2 review(s) deleted successfully!"
    assert db_session.query(Review).count() == 0


def test_bulk_delete_empty_selection(client, admin_headers):
    response = client.post("/api/v1/admin/reviews/bulk-delete", json={"ids": []}, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["detail"] == "No reviews selected for deletion."


def test_bulk_delete_unknown_ids(client, admin_headers):
    response = client.post("/api/v1/admin/reviews/bulk-delete", json={"ids": [404]}, headers=admin_headers)
    assert response.status_code == 404


def test_reviews_by_experience(client, db_session, admin_headers, visitor_user, experience):
    add_review(db_session, visitor_user, experience, 5)
    response = client.get(f"/api/v1/admin/reviews/experience/{experience.experience_id}", headers=admin_headers)
    assert response.status_code == 200
    assert len(response.json()) == 1
