"""
Tests for the JSON endpoints.
"""
import json
import uuid

import pytest
from django.db import DatabaseError

from blog_cms import services

COVER = "https://example.com/cover.png"


def put_json(client, url, data):
    return client.put(url, json.dumps(data), content_type="application/json")


def post_json(client, url, data):
    return client.post(url, json.dumps(data), content_type="application/json")


class TestPublicViews:
    def test_post_list_only_published(self, client, post, category):
        published = services.create_post({
            "title": "Live",
            "content": "<p>Hello</p><script>alert(1)</script>",
            "cover_image_url": COVER,
            "category_ids": [str(category.pk)],
            "published": True,
        })
        response = client.get("/api/posts")
        assert response.status_code == 200
        data = response.json()
        assert [p["id"] for p in data] == [str(published.pk)]
        assert data[0]["categories"] == [{"id": str(category.pk), "name": "Tech"}]
        assert "<script>" not in data[0]["contentHtml"]
        assert "<p>Hello</p>" in data[0]["contentHtml"]

    def test_draft_detail_is_returned_with_its_state(self, client, post):
        response = client.get(f"/api/posts/{post.pk}")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(post.pk)
        assert data["published"] is False
        assert data["contentHtml"] == "World"

    def test_unknown_post(self, client, db):
        response = client.get(f"/api/posts/{uuid.uuid4()}")
        assert response.status_code == 404
        assert "error" in response.json()

    def test_public_categories_have_no_counts(self, client, post):
        data = client.get("/api/categories").json()
        assert data[0]["name"] == "Tech"
        assert "postCount" not in data[0]

    def test_create_category_conflict(self, client, category):
        response = post_json(client, "/api/categories", {"name": " Tech "})
        assert response.status_code == 409
        assert "error" in response.json()

    def test_storage_failure_is_500(self, client, db, monkeypatch):
        def broken():
            raise DatabaseError("connection lost")

        monkeypatch.setattr(services, "list_published_posts", broken)
        response = client.get("/api/posts")
        assert response.status_code == 500
        assert response.json() == {"error": "The storage backend failed."}


class TestAdminPostViews:
    def test_list_includes_drafts(self, client, post):
        data = client.get("/api/admin/posts").json()
        assert [p["id"] for p in data] == [str(post.pk)]
        assert "contentHtml" not in data[0]

    def test_create_post(self, client, category):
        response = post_json(client, "/api/admin/posts", {
            "title": "New",
            "content": "Body",
            "coverImageURL": COVER,
            "categoryIds": [str(category.pk)],
        })
        assert response.status_code == 201
        data = response.json()
        assert data["published"] is False
        assert data["categoryIds"] == [str(category.pk)]
        assert data["version"] == 1

    def test_create_post_validation_errors(self, client, db):
        response = post_json(client, "/api/admin/posts", {"title": "x" * 101})
        assert response.status_code == 400
        errors = response.json()["errors"]
        assert set(errors) == {"title", "content", "coverImageURL", "categoryIds"}

    def test_invalid_json(self, client, db):
        response = client.post("/api/admin/posts", "{nope", content_type="application/json")
        assert response.status_code == 400
        assert response.json() == {"error": "Request body is not valid JSON."}

    def test_get_update_delete(self, client, post, other_category):
        url = f"/api/admin/posts/{post.pk}"
        assert client.get(url).json()["title"] == "Hi"

        response = put_json(client, url, {
            "title": "Edited",
            "content": "World",
            "coverImageURL": COVER,
            "categoryIds": [str(other_category.pk)],
            "published": True,
            "version": 1,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Edited"
        assert data["published"] is True
        assert data["categoryIds"] == [str(other_category.pk)]
        assert data["version"] == 2

        assert client.delete(url).status_code == 200
        assert client.get(url).status_code == 404

    def test_stale_version_conflict(self, client, post, category):
        url = f"/api/admin/posts/{post.pk}"
        body = {
            "title": "Edited",
            "content": "World",
            "coverImageURL": COVER,
            "categoryIds": [str(category.pk)],
            "version": 1,
        }
        assert put_json(client, url, body).status_code == 200
        assert put_json(client, url, body).status_code == 409

    def test_method_not_allowed(self, client, post):
        response = client.patch(f"/api/admin/posts/{post.pk}")
        assert response.status_code == 405
        assert "error" in response.json()


class TestAdminCategoryViews:
    def test_list_with_counts(self, client, post):
        data = client.get("/api/admin/categories").json()
        assert data == [{
            "id": data[0]["id"],
            "name": "Tech",
            "imageURL": None,
            "description": None,
            "createdAt": data[0]["createdAt"],
            "updatedAt": data[0]["updatedAt"],
            "postCount": 1,
        }]

    def test_create_blank_name(self, client, db):
        response = post_json(client, "/api/admin/categories", {"name": "  "})
        assert response.status_code == 400
        assert "name" in response.json()["errors"]

    def test_update_partial(self, client, category):
        url = f"/api/admin/categories/{category.pk}"
        response = put_json(client, url, {"imageURL": "https://example.com/t.png"})
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Tech"
        assert data["imageURL"] == "https://example.com/t.png"

    def test_delete(self, client, post, category):
        url = f"/api/admin/categories/{category.pk}"
        assert client.delete(url).status_code == 200
        assert client.get(url).status_code == 404
        assert client.get(f"/api/admin/posts/{post.pk}").json()["categoryIds"] == []

    @pytest.mark.parametrize("policy,status", [("cascade", 200), ("protect", 409)])
    def test_delete_policy(self, client, settings, post, category, policy, status):
        settings.BLOG_CMS = {"CATEGORY_DELETE_POLICY": policy}
        assert client.delete(f"/api/admin/categories/{category.pk}").status_code == status
