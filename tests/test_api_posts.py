"""
HTTP tests for the post and group endpoints.
"""

from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import text

from backend.trailmate.core.errors import register_exception_handlers

ALPINE_TREK = {"title": "Alpine Trek", "description": "2-day hike", "location": "Alps"}


@pytest.fixture
def u1(make_user):
    return make_user("U1")


@pytest.fixture
def u2(make_user):
    return make_user("U2")


@pytest.fixture
def u1_client(login, u1):
    return login(u1)


@pytest.fixture
def u2_client(login, u2):
    return login(u2)


@pytest.fixture
def created(u1_client):
    response = u1_client.post("/api/posts/createPost", json=ALPINE_TREK)
    assert response.status_code == 201, response.text
    return response.json()


def test_ping(client):
    response = client.get("/api/ping")
    assert response.status_code == 200
    assert response.json() == {"message": "Pong!"}


def test_root_and_health(client):
    assert client.get("/").json()["message"] == "TrailMate API"
    assert client.get("/health").json()["status"] == "healthy"


class TestCreatePost:
    def test_create_post(self, created, u1):
        post, group = created["post"], created["group"]

        assert created["message"] == "Post created successfully"
        assert post["createdBy"] == str(u1.id)
        assert post["members"] == [str(u1.id)]
        assert post["groupId"] == group["id"]
        assert post["image"] == ""
        assert group["postId"] == post["id"]
        assert group["admin"] == str(u1.id)
        assert group["members"] == [str(u1.id)]
        assert group["groupName"] == "Alpine Trek - Trekking Group"

    def test_missing_fields(self, u1_client):
        response = u1_client.post("/api/posts/createPost", json={"title": "Alpine Trek"})

        assert response.status_code == 400
        assert response.json() == {"error": "All fields are required"}
        assert u1_client.get("/api/posts/listPosts").json() == []

    def test_requires_session(self, client):
        response = client.post("/api/posts/createPost", json=ALPINE_TREK)

        assert response.status_code == 401
        assert response.json() == {"error": "Not authenticated"}

    def test_unknown_session_cookie(self, app, u1):
        from fastapi.testclient import TestClient

        stranger = TestClient(app, cookies={"trailmate_session": "not-a-real-token"})
        response = stranger.post("/api/posts/createPost", json=ALPINE_TREK)

        assert response.status_code == 401


class TestListing:
    def test_list_posts_expands_creator_and_group(self, client, created, u1):
        response = client.get("/api/posts/listPosts")

        assert response.status_code == 200
        posts = response.json()
        assert len(posts) == 1
        assert posts[0]["creator"] == {"id": str(u1.id), "name": "U1", "email": "u1@example.com"}
        assert posts[0]["group"]["id"] == created["group"]["id"]
        assert posts[0]["group"]["groupName"] == "Alpine Trek - Trekking Group"

    def test_list_groups(self, client, created):
        response = client.get("/api/groups/listGroups")

        assert response.status_code == 200
        assert [group["id"] for group in response.json()] == [created["group"]["id"]]

    def test_get_group(self, client, created):
        group_id = created["group"]["id"]
        response = client.get(f"/api/groups/{group_id}")

        assert response.status_code == 200
        assert response.json()["postId"] == created["post"]["id"]

    def test_get_unknown_group(self, client):
        response = client.get(f"/api/groups/{uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"error": "Group not found"}


class TestJoinLeave:
    def test_join(self, u2_client, created, u1, u2):
        post_id = created["post"]["id"]

        response = u2_client.post(f"/api/posts/join/{post_id}")

        assert response.status_code == 200
        assert response.json() == {
            "message": "Joined post successfully",
            "groupId": created["group"]["id"],
        }
        group = u2_client.get(f"/api/groups/{created['group']['id']}").json()
        assert group["members"] == [str(u1.id), str(u2.id)]

    def test_join_twice(self, u2_client, created):
        post_id = created["post"]["id"]
        u2_client.post(f"/api/posts/join/{post_id}")

        response = u2_client.post(f"/api/posts/join/{post_id}")

        assert response.status_code == 400
        assert response.json() == {"error": "You are already in this group"}
        posts = u2_client.get("/api/posts/listPosts").json()
        assert len(posts[0]["members"]) == 2

    def test_join_unknown_post(self, u2_client):
        response = u2_client.post(f"/api/posts/join/{uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"error": "Post not found"}

    def test_malformed_post_id(self, u2_client):
        response = u2_client.post("/api/posts/join/not-a-uuid")

        assert response.status_code == 400
        assert "error" in response.json()

    def test_leave(self, u2_client, created, u1):
        post_id = created["post"]["id"]
        u2_client.post(f"/api/posts/join/{post_id}")

        response = u2_client.post(f"/api/posts/leave/{post_id}")

        assert response.status_code == 200
        assert response.json() == {"message": "You have left the post and group successfully"}
        post = u2_client.get("/api/posts/listPosts").json()[0]
        assert post["members"] == [str(u1.id)]
        assert post["group"]["members"] == [str(u1.id)]

    def test_leave_without_membership(self, u2_client, created):
        response = u2_client.post(f"/api/posts/leave/{created['post']['id']}")

        assert response.status_code == 400
        assert response.json() == {"error": "You are not a member of this post"}

    def test_creator_leave_deletes(self, u1_client, created):
        response = u1_client.post(f"/api/posts/leave/{created['post']['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Post and associated group deleted successfully"}
        assert u1_client.get("/api/posts/listPosts").json() == []
        assert u1_client.get("/api/groups/listGroups").json() == []


class TestDelete:
    def test_delete_by_creator(self, u1_client, created):
        response = u1_client.delete(f"/api/posts/delete/{created['post']['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Post and associated group deleted successfully"}
        assert u1_client.get("/api/groups/listGroups").json() == []

    def test_delete_by_other_user(self, u2_client, created):
        response = u2_client.delete(f"/api/posts/delete/{created['post']['id']}")

        assert response.status_code == 403
        assert response.json() == {
            "error": "Unauthorized: Only the post creator can delete this post"
        }
        assert len(u2_client.get("/api/posts/listPosts").json()) == 1
        assert len(u2_client.get("/api/groups/listGroups").json()) == 1

    def test_delete_unknown_post(self, u1_client):
        response = u1_client.delete(f"/api/posts/delete/{uuid4()}")
        assert response.status_code == 404


class TestUpdate:
    def test_update_title_renames_group(self, u1_client, created):
        response = u1_client.patch(
            f"/api/posts/{created['post']['id']}", json={"title": "Dolomites Loop"}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Post updated successfully"
        assert body["post"]["title"] == "Dolomites Loop"
        assert body["group"]["groupName"] == "Dolomites Loop - Trekking Group"

    def test_update_by_other_user(self, u2_client, created):
        response = u2_client.patch(
            f"/api/posts/{created['post']['id']}", json={"image": "https://example.com/x.jpg"}
        )
        assert response.status_code == 403


class TestServerErrors:
    """Storage failures outside a write still answer with the ``{"error"}`` body."""

    @pytest.fixture
    def broken_store(self, engine, created):
        with engine.begin() as conn:
            conn.execute(text("DROP TABLE post_member"))
        return created

    def test_list_posts_on_database_failure(self, app, broken_store):
        response = TestClient(app, raise_server_exceptions=False).get("/api/posts/listPosts")

        assert response.status_code == 500
        assert response.json() == {"error": "Server error"}

    def test_join_on_database_failure(self, app, u2_client, broken_store):
        user_client = TestClient(app, raise_server_exceptions=False)
        user_client.cookies = u2_client.cookies

        response = user_client.post(f"/api/posts/join/{broken_store['post']['id']}")

        assert response.status_code == 500
        assert response.json() == {"error": "Server error"}

    def test_unexpected_exception(self):
        app = FastAPI()
        register_exception_handlers(app)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("boom")

        response = TestClient(app, raise_server_exceptions=False).get("/boom")

        assert response.status_code == 500
        assert response.json() == {"error": "Server error"}
