"""Admin and public post endpoints against a real database."""

from datetime import UTC, datetime, timedelta

import pytest

from church_site.adapters.sqlite.repos import SQLitePostRepo
from church_site.domain.entities import Post, Scheduled


@pytest.fixture
def create(client, admin_headers):
    def _create(**fields):
        body = {"title": "Bible Study", "content": "Romans 8, fellowship hall.", "type": "event"}
        body.update(fields)
        response = client.post("/api/admin/posts", json=body, headers=admin_headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create


def subscribe(client, *emails):
    for email in emails:
        assert client.post("/api/public/newsletter/subscribe", json={"email": email}).is_success


class TestAdminPosts:
    def test_requires_admin(self, client):
        assert client.get("/api/admin/posts").status_code == 401
        assert client.post("/api/admin/posts", json={}).status_code == 401

    def test_create_draft(self, create, admin_headers):
        body = create()

        post = body["post"]
        assert post["status"] == "draft"
        assert post["published_at"] is None
        assert post["author_email"] == "pastor@church.example"
        assert post["author_name"] == "Rev. Kim"
        assert post["excerpt"] == "Romans 8, fellowship hall."
        assert body["notification"] is None

    def test_validation_errors_are_400(self, client, admin_headers):
        response = client.post(
            "/api/admin/posts",
            json={"title": " ", "content": "x", "type": "sermon"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        codes = {e["code"] for e in response.json()["detail"]}
        assert codes == {"MISSING_REQUIRED_FIELD", "INVALID_TYPE"}

    def test_schedule_in_past_is_400(self, client, admin_headers):
        past = (datetime.now(UTC) - timedelta(hours=1)).isoformat()

        response = client.post(
            "/api/admin/posts",
            json={"title": "T", "content": "C", "status": "scheduled", "scheduled_for": past},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"][0]["code"] == "SCHEDULE_IN_PAST"

    def test_publish_with_announce_notifies(self, create, client, admin_headers, dev_email):
        subscribe(client, "a@example.com", "b@example.com")

        body = create(status="published", announce=True)

        note = body["notification"]
        assert note["success"] is True
        assert note["recipient_count"] == 2
        assert note["delivered_count"] == 2
        assert dev_email.email_count == 2
        assert dev_email.get_last_email().subject == "[church-news] Bible Study"

        receipts = client.get("/api/admin/newsletter/receipts", headers=admin_headers).json()
        assert receipts[0]["id"] == note["receipt_id"]
        assert receipts[0]["recipients"] == ["a@example.com", "b@example.com"]

    def test_announce_ignored_for_drafts(self, create, client, dev_email):
        subscribe(client, "a@example.com")

        body = create(announce=True)

        assert body["notification"] is None
        assert dev_email.email_count == 0

    def test_publish_without_announce_is_silent(self, create, client, dev_email):
        subscribe(client, "a@example.com")

        create(status="published")

        assert dev_email.email_count == 0

    def test_update_keeps_first_publication(self, create, client, admin_headers):
        post = create(status="published")["post"]

        response = client.put(
            f"/api/admin/posts/{post['id']}",
            json={
                "title": "Bible Study (Room 2)",
                "content": "Moved.",
                "type": "event",
                "status": "published",
            },
            headers=admin_headers,
        )

        assert response.status_code == 200
        updated = response.json()["post"]
        assert updated["published_at"] == post["published_at"]
        assert updated["title"] == "Bible Study (Room 2)"
        assert updated["author_email"] == post["author_email"]

    def test_unpublish_clears_time(self, create, client, admin_headers):
        post = create(status="published")["post"]

        response = client.put(
            f"/api/admin/posts/{post['id']}",
            json={"title": "T", "content": "C", "type": "event", "status": "draft"},
            headers=admin_headers,
        )

        assert response.json()["post"]["published_at"] is None

    def test_update_missing_is_404(self, client, admin_headers):
        response = client.put(
            "/api/admin/posts/00000000-0000-0000-0000-000000000000",
            json={"title": "T", "content": "C"},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_get_and_delete(self, create, client, admin_headers):
        post = create()["post"]

        assert client.get(f"/api/admin/posts/{post['id']}", headers=admin_headers).is_success
        assert client.delete(
            f"/api/admin/posts/{post['id']}", headers=admin_headers
        ).status_code == 204
        assert client.delete(
            f"/api/admin/posts/{post['id']}", headers=admin_headers
        ).status_code == 404

    def test_list_includes_drafts(self, create, client, admin_headers):
        create(title="Draft")
        create(title="Live", status="published")

        everything = client.get("/api/admin/posts", headers=admin_headers).json()
        visible = client.get(
            "/api/admin/posts", params={"include_drafts": False}, headers=admin_headers
        ).json()

        assert everything["count"] == 2
        assert [p["title"] for p in visible["posts"]] == ["Live"]

    def test_promote_due(self, client, admin_headers, test_db_path):
        due = Post(
            title="Sunday Service",
            content="10am",
            type="announcement",
            state=Scheduled(scheduled_for=datetime.now(UTC) - timedelta(minutes=5)),
        )
        SQLitePostRepo(test_db_path).save(due)

        response = client.post("/api/admin/posts/promote-due", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["promoted_ids"] == [str(due.id)]
        assert SQLitePostRepo(test_db_path).get_by_id(due.id).status == "published"


class TestPublicPosts:
    def test_feed_shows_published_only(self, create, client):
        create(title="Hidden")
        create(title="Visible", status="published", category="sunday")

        response = client.get("/api/public/posts")

        assert response.status_code == 200
        assert [p["title"] for p in response.json()["posts"]] == ["Visible"]

    def test_feed_filters(self, create, client):
        create(title="Event", status="published")
        create(title="Notice", status="published", type="announcement")

        response = client.get("/api/public/posts", params={"type": "announcement"})

        assert [p["title"] for p in response.json()["posts"]] == ["Notice"]

    def test_draft_detail_is_404(self, create, client):
        draft = create()["post"]

        assert client.get(f"/api/public/posts/{draft['id']}").status_code == 404

    def test_published_detail(self, create, client):
        post = create(status="published")["post"]

        response = client.get(f"/api/public/posts/{post['id']}")

        assert response.json()["title"] == "Bible Study"

    def test_search(self, create, client):
        create(title="Choir Rehearsal", status="published")
        create(title="Choir Draft")

        response = client.get("/api/public/posts/search", params={"q": "choir"})

        assert [p["title"] for p in response.json()["posts"]] == ["Choir Rehearsal"]
