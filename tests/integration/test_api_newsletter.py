"""Public subscription endpoints and the admin newsletter screens."""


def subscribe(client, email, name=None):
    return client.post("/api/public/newsletter/subscribe", json={"email": email, "name": name})


def unsubscribe(client, email):
    return client.post("/api/public/newsletter/unsubscribe", json={"email": email})


class TestPublicNewsletter:
    def test_subscribe(self, client):
        response = subscribe(client, "Member@Example.com", "Member")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Subscribed"}

    def test_subscribe_twice_is_ok(self, client):
        subscribe(client, "member@example.com")

        response = subscribe(client, "MEMBER@example.com")

        assert response.status_code == 200
        assert "already subscribed" in response.json()["message"]

    def test_invalid_email_is_400(self, client):
        response = subscribe(client, "not-an-email")

        assert response.status_code == 400
        assert response.json()["detail"][0]["code"] == "INVALID_FORMAT"

    def test_unsubscribe_then_resubscribe(self, client, admin_headers):
        subscribe(client, "member@example.com")

        left = unsubscribe(client, "member@example.com")
        back = subscribe(client, "member@example.com")

        assert left.status_code == 200
        assert "Welcome back" in back.json()["message"]
        listing = client.get("/api/admin/newsletter/subscribers", headers=admin_headers).json()
        assert listing["total"] == 1
        assert listing["subscribers"][0]["is_active"] is True

    def test_unsubscribe_unknown_is_404(self, client):
        response = unsubscribe(client, "nobody@example.com")

        assert response.status_code == 404


class TestAdminNewsletter:
    def test_requires_admin(self, client):
        assert client.get("/api/admin/newsletter/subscribers").status_code == 401
        assert client.post("/api/admin/newsletter/send", json={}).status_code == 401

    def test_list_and_stats(self, client, admin_headers):
        subscribe(client, "a@example.com", "Ann")
        subscribe(client, "b@example.com")
        unsubscribe(client, "b@example.com")

        active = client.get(
            "/api/admin/newsletter/subscribers",
            params={"is_active": True},
            headers=admin_headers,
        ).json()
        stats = client.get(
            "/api/admin/newsletter/subscribers/stats", headers=admin_headers
        ).json()

        assert [s["email"] for s in active["subscribers"]] == ["a@example.com"]
        assert stats == {"total": 2, "active": 1, "inactive": 1, "this_week": 2}

    def test_delete_subscriber(self, client, admin_headers):
        subscribe(client, "a@example.com")
        listing = client.get("/api/admin/newsletter/subscribers", headers=admin_headers).json()
        subscriber_id = listing["subscribers"][0]["id"]

        first = client.delete(
            f"/api/admin/newsletter/subscribers/{subscriber_id}", headers=admin_headers
        )
        second = client.delete(
            f"/api/admin/newsletter/subscribers/{subscriber_id}", headers=admin_headers
        )

        assert first.status_code == 204
        assert second.status_code == 404

    def test_send_reports_partial_failure(self, client, admin_headers, dev_email):
        subscribe(client, "a@example.com")
        subscribe(client, "b@example.com")
        dev_email.fail_for = {"b@example.com"}

        response = client.post(
            "/api/admin/newsletter/send",
            json={"title": "Retreat", "content": "Sign-ups open.", "type": "announcement"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert (body["recipient_count"], body["delivered_count"], body["failed_count"]) == (
            2,
            1,
            1,
        )
        receipt = client.get("/api/admin/newsletter/receipts", headers=admin_headers).json()[0]
        failed = [d for d in receipt["deliveries"] if d["status"] == "failed"]
        assert [d["recipient"] for d in failed] == ["b@example.com"]

    def test_send_with_no_subscribers_writes_receipt(self, client, admin_headers, dev_email):
        response = client.post(
            "/api/admin/newsletter/send",
            json={"title": "Quiet week", "content": "Nothing new."},
            headers=admin_headers,
        )

        assert response.json()["success"] is True
        assert response.json()["recipient_count"] == 0
        receipts = client.get("/api/admin/newsletter/receipts", headers=admin_headers).json()
        assert len(receipts) == 1
        assert dev_email.email_count == 0
