from store import NOTIFICATIONS


def add_comment(client, user, blog_id, text, **extra):
    response = client.post("/add-comment", json=dict({"_id": blog_id, "comment": text}, **extra), headers=user["headers"])
    return response.json()["_id"]


class TestNotifications:
    def test_new_notification_flag(self, client, admin, reader, published):
        assert client.get("/new-notification", headers=admin["headers"]).json() == {"new_notification_available": False}

        add_comment(client, reader, published, "Hello")
        assert client.get("/new-notification", headers=admin["headers"]).json() == {"new_notification_available": True}

    def test_own_activity_is_hidden(self, client, admin, published, store):
        add_comment(client, admin, published, "Talking to myself")
        client.post("/like-blog", json={"_id": published}, headers=admin["headers"])

        assert store.count(NOTIFICATIONS) == 2
        assert client.get("/new-notification", headers=admin["headers"]).json() == {"new_notification_available": False}
        assert client.post("/all-notifications-count", json={"filter": "all"}, headers=admin["headers"]).json() == {"totalDocs": 0}
        # the hidden like still backs the liked state
        assert client.post("/is-liked-by-user", json={"_id": published}, headers=admin["headers"]).json() == {"result": True}

    def test_feed_populates_and_marks_seen(self, client, admin, reader, published):
        comment_id = add_comment(client, reader, published, "Hello")
        client.post("/like-blog", json={"_id": published}, headers=reader["headers"])

        response = client.post("/notifications", json={"page": 1, "filter": "all"}, headers=admin["headers"])
        assert response.status_code == 200
        notifications = response.json()["notifications"]
        assert {n["type"] for n in notifications} == {"comment", "like"}
        assert all(n["seen"] is False for n in notifications)
        assert all(n["user"]["personal_info"]["username"] == "alan" for n in notifications)
        assert all(n["blog"]["blog_id"] == published for n in notifications)

        commented = next(n for n in notifications if n["type"] == "comment")
        assert commented["comment"] == {"_id": comment_id, "comment": "Hello"}

        again = client.post("/notifications", json={"page": 1, "filter": "all"}, headers=admin["headers"]).json()
        assert all(n["seen"] is True for n in again["notifications"])
        assert client.get("/new-notification", headers=admin["headers"]).json() == {"new_notification_available": False}

    def test_filter_and_count(self, client, admin, reader, published):
        parent = add_comment(client, reader, published, "Hello")
        client.post("/like-blog", json={"_id": published}, headers=reader["headers"])
        add_comment(client, admin, published, "Hi back", replying_to=parent)

        def count(user, kind):
            return client.post("/all-notifications-count", json={"filter": kind}, headers=user["headers"]).json()["totalDocs"]

        assert count(admin, "all") == 2
        assert count(admin, "like") == 1
        assert count(admin, "comment") == 1
        assert count(reader, "reply") == 1

        likes = client.post("/notifications", json={"page": 1, "filter": "like"}, headers=admin["headers"]).json()
        assert [n["type"] for n in likes["notifications"]] == ["like"]

        replies = client.post("/notifications", json={"page": 1, "filter": "reply"}, headers=reader["headers"]).json()
        reply = replies["notifications"][0]
        assert reply["replied_on_comment"]["comment"] == "Hello"
        assert reply["comment"]["comment"] == "Hi back"

    def test_paging_compensates_for_deleted_docs(self, client, admin, register, published):
        for i in range(12):
            fan = register(f"Fan Number {i}", f"fan{i}@example.com")
            add_comment(client, fan, published, f"comment {i}")

        second = client.post("/notifications", json={"page": 2, "filter": "all"}, headers=admin["headers"]).json()
        shifted = client.post(
            "/notifications", json={"page": 2, "filter": "all", "deletedDocCount": 2}, headers=admin["headers"]
        ).json()
        assert len(second["notifications"]) == 2
        assert len(shifted["notifications"]) == 4

    def test_unknown_filter_is_rejected(self, client, admin):
        response = client.post("/notifications", json={"page": 1, "filter": "mentions"}, headers=admin["headers"])
        assert response.status_code == 400
        assert "filter" in response.json()["error"]

    def test_requires_token(self, client):
        assert client.get("/new-notification").status_code == 401
