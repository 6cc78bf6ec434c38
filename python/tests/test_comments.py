"""Integration tests for comments."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from huddle.db.models import Comment
from tests.factories import create_test_comment, create_test_post, create_test_user, make_friends
from tests.helpers import auth_headers, error_code

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


@pytest.fixture
def alice(db_session):
    return create_test_user(db_session, username="alice")


@pytest.fixture
def bob(db_session):
    return create_test_user(db_session, username="bob")


@pytest.fixture
def eve(db_session):
    return create_test_user(db_session, username="eve")


@pytest.fixture
def friends(db_session, alice, bob):
    make_friends(db_session, alice.id, bob.id)


@pytest.fixture
def post(db_session, alice):
    return create_test_post(db_session, alice.id)


class TestCreateComment:
    def test_friend_comments(self, auth_client, alice, bob, friends, post):
        response = auth_client.post(
            f"/comments/{post.id}", json={"content": "nice"}, headers=auth_headers(bob.id)
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["content"] == "nice"
        assert data["post_id"] == str(post.id)
        assert data["author"]["username"] == "bob"

    def test_missing_post(self, auth_client, bob):
        response = auth_client.post(
            f"/comments/{uuid4()}", json={"content": "nice"}, headers=auth_headers(bob.id)
        )

        assert response.status_code == 404
        assert error_code(response) == "E_POST_NOT_FOUND"

    def test_blank_content(self, auth_client, bob, friends, post):
        response = auth_client.post(
            f"/comments/{post.id}", json={"content": " "}, headers=auth_headers(bob.id)
        )

        assert response.status_code == 400

    def test_stranger_cannot_comment(self, auth_client, db_session, eve, post):
        response = auth_client.post(
            f"/comments/{post.id}", json={"content": "hello"}, headers=auth_headers(eve.id)
        )

        assert response.status_code == 403
        assert error_code(response) == "E_FORBIDDEN"
        assert db_session.scalar(select(func.count()).select_from(Comment)) == 0


class TestListComments:
    def test_newest_first_with_authors(self, auth_client, db_session, alice, bob, post):
        create_test_comment(db_session, post.id, alice.id, "first", created_at=T0)
        create_test_comment(db_session, post.id, bob.id, "second", created_at=T0 + timedelta(minutes=5))

        response = auth_client.get(f"/comments/post/{post.id}", headers=auth_headers(alice.id))

        assert response.status_code == 200
        data = response.json()["data"]
        assert [c["content"] for c in data] == ["second", "first"]
        assert [c["author"]["username"] for c in data] == ["bob", "alice"]

    def test_missing_post_lists_nothing(self, auth_client, alice):
        response = auth_client.get(f"/comments/post/{uuid4()}", headers=auth_headers(alice.id))

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_friend_reads_comments(self, auth_client, db_session, alice, bob, friends, post):
        create_test_comment(db_session, post.id, alice.id, "for friends")

        response = auth_client.get(f"/comments/post/{post.id}", headers=auth_headers(bob.id))

        assert [c["content"] for c in response.json()["data"]] == ["for friends"]

    def test_stranger_cannot_read_comments(self, auth_client, db_session, alice, eve, post):
        create_test_comment(db_session, post.id, alice.id, "secret")

        response = auth_client.get(f"/comments/post/{post.id}", headers=auth_headers(eve.id))

        assert response.status_code == 403
        assert error_code(response) == "E_FORBIDDEN"


class TestUpdateDeleteComment:
    def test_author_updates(self, auth_client, db_session, bob, post):
        comment = create_test_comment(db_session, post.id, bob.id, "tpyo")

        response = auth_client.put(
            f"/comments/{comment.id}", json={"content": "typo"}, headers=auth_headers(bob.id)
        )

        assert response.status_code == 200
        assert response.json()["data"]["content"] == "typo"

    def test_post_owner_cannot_edit_others_comment(self, auth_client, db_session, alice, bob, post):
        comment = create_test_comment(db_session, post.id, bob.id)

        response = auth_client.put(
            f"/comments/{comment.id}", json={"content": "edited"}, headers=auth_headers(alice.id)
        )

        assert response.status_code == 403
        assert error_code(response) == "E_NOT_OWNER"

    def test_author_deletes(self, auth_client, db_session, bob, post):
        comment_id = create_test_comment(db_session, post.id, bob.id).id

        response = auth_client.delete(f"/comments/{comment_id}", headers=auth_headers(bob.id))

        assert response.status_code == 204
        db_session.expire_all()
        assert db_session.get(Comment, comment_id) is None

    def test_non_author_cannot_delete(self, auth_client, db_session, alice, bob, post):
        comment = create_test_comment(db_session, post.id, bob.id)

        response = auth_client.delete(f"/comments/{comment.id}", headers=auth_headers(alice.id))

        assert response.status_code == 403

    def test_missing_comment(self, auth_client, bob):
        response = auth_client.delete(f"/comments/{uuid4()}", headers=auth_headers(bob.id))

        assert response.status_code == 404
        assert error_code(response) == "E_COMMENT_NOT_FOUND"
