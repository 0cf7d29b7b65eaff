"""Tests for review and reply endpoints."""

from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from conftest import auth_header, signup


def _review(client: FlaskClient, token: str, game_id: str, rating=4, text="Good"):
    return client.post(
        f"/reviews/game/{game_id}",
        json={"rating": rating, "text": text},
        headers=auth_header(token),
    )


def test_add_review(client: FlaskClient, game: dict):
    signed = signup(client, "player@example.com")

    response = _review(client, signed["token"], game["id"], rating=5, text="  Great  ")

    assert response.status_code == 201
    data = response.get_json()
    assert data["message"] == "Review added successfully"
    review = data["review"]
    assert review["rating"] == 5
    assert review["text"] == "Great"
    assert review["gameId"] == game["id"]
    assert review["userId"] == signed["user"]["id"]
    assert review["userEmail"] == "player@example.com"
    assert review["replies"] == []


def test_review_requires_login(client: FlaskClient, game: dict):
    response = client.post(f"/reviews/game/{game['id']}", json={"rating": 4})

    assert response.status_code == 401


@pytest.mark.parametrize("rating", [0, 6, "abc", 4.5, True])
def test_review_rating_must_be_between_one_and_five(client, game, rating):
    token = signup(client, "player@example.com")["token"]

    response = _review(client, token, game["id"], rating=rating)

    assert response.status_code == 400
    assert response.get_json()["detail"] == "Rating must be between 1 and 5."


def test_non_finite_rating_is_a_validation_error(client, game):
    token = signup(client, "player@example.com")["token"]
    body = '{"rating": 1e999, "text": "x"}'

    created = client.post(
        f"/reviews/game/{game['id']}",
        data=body,
        content_type="application/json",
        headers=auth_header(token),
    )
    assert created.status_code == 400
    assert created.get_json()["detail"] == "Rating must be between 1 and 5."

    review = _review(client, token, game["id"]).get_json()["review"]
    updated = client.put(
        f"/reviews/{review['id']}",
        data=body,
        content_type="application/json",
        headers=auth_header(token),
    )
    assert updated.status_code == 400


def test_review_text_is_capped(client, game):
    token = signup(client, "player@example.com")["token"]

    response = _review(client, token, game["id"], text="x" * 2001)

    assert response.status_code == 400


def test_review_for_missing_game_returns_404(client):
    token = signup(client, "player@example.com")["token"]

    assert _review(client, token, "missing").status_code == 404


def test_second_review_of_same_game_conflicts(client, game):
    token = signup(client, "player@example.com")["token"]
    assert _review(client, token, game["id"]).status_code == 201

    response = _review(client, token, game["id"], rating=1)

    assert response.status_code == 409
    assert response.get_json()["detail"] == "You have already reviewed this game"


def test_list_game_reviews_paginates_newest_first(client, game):
    for index in range(3):
        token = signup(client, f"p{index}@example.com")["token"]
        assert _review(client, token, game["id"], rating=index + 1).status_code == 201

    first = client.get(f"/reviews/game/{game['id']}?page=1&limit=2").get_json()
    second = client.get(f"/reviews/game/{game['id']}?page=2&limit=2").get_json()

    assert first["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
    assert [review["rating"] for review in first["reviews"]] == [3, 2]
    assert [review["rating"] for review in second["reviews"]] == [1]


def test_list_game_reviews_ignores_bad_pagination(client, game):
    response = client.get(f"/reviews/game/{game['id']}?page=-3&limit=zero")

    assert response.status_code == 200
    assert response.get_json()["pagination"] == {
        "page": 1,
        "limit": 20,
        "total": 0,
        "pages": 0,
    }
    capped = client.get(f"/reviews/game/{game['id']}?limit=1000").get_json()
    assert capped["pagination"]["limit"] == 100

    huge = client.get(f"/reviews/game/{game['id']}?page=99999999999999999999")
    assert huge.status_code == 200
    assert huge.get_json()["pagination"]["page"] == 1

    last = client.get(f"/reviews/game/{game['id']}?page=100000&limit=100")
    assert last.status_code == 200
    assert last.get_json()["reviews"] == []


def test_list_reviews_for_missing_game_returns_404(client):
    assert client.get("/reviews/game/missing").status_code == 404


def test_list_user_reviews_includes_game_details(client, game):
    signed = signup(client, "player@example.com")
    _review(client, signed["token"], game["id"])

    response = client.get(f"/reviews/user/{signed['user']['id']}")

    assert response.status_code == 200
    data = response.get_json()
    assert data["pagination"]["total"] == 1
    assert data["reviews"][0]["gameTitle"] == "Chess"
    assert data["reviews"][0]["gameImage"] == game["imageUrl"]


def test_replies_are_nested_oldest_first(client, game, admin_token):
    author = signup(client, "author@example.com")["token"]
    review = _review(client, author, game["id"]).get_json()["review"]

    for text, token in (("first", admin_token), ("second", author)):
        response = client.post(
            f"/reviews/{review['id']}/replies",
            json={"text": text},
            headers=auth_header(token),
        )
        assert response.status_code == 201
        assert response.get_json()["message"] == "Reply added successfully"

    listed = client.get(f"/reviews/game/{game['id']}").get_json()["reviews"][0]
    assert [reply["text"] for reply in listed["replies"]] == ["first", "second"]
    assert listed["replies"][0]["reviewId"] == review["id"]


@pytest.mark.parametrize("text", ["", "   ", "x" * 2001])
def test_reply_text_is_required_and_capped(client, game, admin_token, text):
    review = _review(client, admin_token, game["id"]).get_json()["review"]

    response = client.post(
        f"/reviews/{review['id']}/replies",
        json={"text": text},
        headers=auth_header(admin_token),
    )

    assert response.status_code == 400


def test_reply_to_missing_review_returns_404(client, admin_token):
    response = client.post(
        "/reviews/missing/replies",
        json={"text": "hello"},
        headers=auth_header(admin_token),
    )

    assert response.status_code == 404


def test_user_replies_listing(client, game):
    signed = signup(client, "player@example.com")
    review = _review(client, signed["token"], game["id"]).get_json()["review"]
    client.post(
        f"/reviews/{review['id']}/replies",
        json={"text": "Replying to myself"},
        headers=auth_header(signed["token"]),
    )

    response = client.get(f"/reviews/user/{signed['user']['id']}/replies")

    assert response.status_code == 200
    replies = response.get_json()["replies"]
    assert len(replies) == 1
    assert replies[0]["gameId"] == game["id"]


def test_only_author_or_admin_may_modify_review(client, game, admin_token):
    author = signup(client, "author@example.com")["token"]
    stranger = signup(client, "stranger@example.com")["token"]
    review = _review(client, author, game["id"]).get_json()["review"]
    url = f"/reviews/{review['id']}"

    forbidden = client.put(url, json={"rating": 1}, headers=auth_header(stranger))
    assert forbidden.status_code == 403
    assert forbidden.get_json()["detail"] == "Not authorized to edit this review."
    assert client.delete(url, headers=auth_header(stranger)).status_code == 403

    by_author = client.put(
        url, json={"rating": 2, "text": "Changed my mind"}, headers=auth_header(author)
    )
    assert by_author.status_code == 200
    assert by_author.get_json()["review"]["rating"] == 2

    by_admin = client.put(url, json={"rating": 3}, headers=auth_header(admin_token))
    assert by_admin.status_code == 200
    assert by_admin.get_json()["review"]["text"] == ""


def test_delete_review_removes_its_replies(client, game, admin_token, repository):
    author = signup(client, "author@example.com")["token"]
    review = _review(client, author, game["id"]).get_json()["review"]
    reply = client.post(
        f"/reviews/{review['id']}/replies",
        json={"text": "Nice"},
        headers=auth_header(admin_token),
    ).get_json()["reply"]

    response = client.delete(f"/reviews/{review['id']}", headers=auth_header(author))

    assert response.status_code == 200
    assert repository.get_reply(reply["id"]) is None
    assert client.get(f"/games/{game['id']}").get_json()["game"]["reviewCount"] == 0
    assert client.delete(f"/reviews/{review['id']}", headers=auth_header(author)).status_code == 404


def test_only_author_or_admin_may_modify_reply(client, game, admin_token):
    author = signup(client, "author@example.com")["token"]
    stranger = signup(client, "stranger@example.com")["token"]
    review = _review(client, admin_token, game["id"]).get_json()["review"]
    reply = client.post(
        f"/reviews/{review['id']}/replies",
        json={"text": "Mine"},
        headers=auth_header(author),
    ).get_json()["reply"]
    url = f"/reviews/replies/{reply['id']}"

    assert client.put(url, json={"text": "Hijack"}, headers=auth_header(stranger)).status_code == 403
    assert client.delete(url, headers=auth_header(stranger)).status_code == 403

    updated = client.put(url, json={"text": "Edited"}, headers=auth_header(author))
    assert updated.status_code == 200
    assert updated.get_json()["reply"]["text"] == "Edited"

    # an admin may remove replies written by other users
    assert client.delete(url, headers=auth_header(admin_token)).status_code == 200
    assert client.put(url, json={"text": "Gone"}, headers=auth_header(author)).status_code == 404


def test_end_to_end_chess_review_and_reply(client, admin_token):
    """Signup, admin adds Chess, A reviews it, B replies, the game shows 4.0 from 1 review."""

    alice = signup(client, "alice@example.com")["token"]
    bob = signup(client, "bob@example.com")["token"]
    chess = client.post(
        "/games",
        json={"title": "Chess", "genre": "Strategy"},
        headers=auth_header(admin_token),
    ).get_json()["game"]

    review = _review(client, alice, chess["id"], rating=4, text="fun").get_json()["review"]
    client.post(
        f"/reviews/{review['id']}/replies",
        json={"text": "agreed"},
        headers=auth_header(bob),
    )

    listed = client.get(f"/reviews/game/{chess['id']}").get_json()["reviews"]
    assert len(listed) == 1
    assert listed[0]["rating"] == 4
    assert [reply["text"] for reply in listed[0]["replies"]] == ["agreed"]
    assert listed[0]["replies"][0]["userEmail"] == "bob@example.com"

    game = client.get(f"/games/{chess['id']}").get_json()["game"]
    assert game["avgRating"] == 4.0
    assert game["reviewCount"] == 1
