def test_custom_notification_lands_in_inbox(client, auth_headers):
    res = client.post("/notifications", headers=auth_headers("admin"), json={
        "userId": "seller1", "title": "Your store is live", "body": "Welcome to Lokal",
        "type": "store_boost", "additionalData": {"storeId": "s1"},
    })
    assert res.status_code == 201
    note = res.get_json()["data"]["notification"]
    assert note["url"] == "https://lokalshops.co.uk/store-profile"
    assert note["data"]["storeId"] == "s1"

    inbox = client.get("/notifications", headers=auth_headers("seller1")).get_json()["data"]
    assert inbox["unread"] == 1
    assert inbox["items"][0]["title"] == "Your store is live"


def test_custom_notification_requires_fields(client, auth_headers):
    res = client.post("/notifications", headers=auth_headers("admin"), json={"userId": "seller1"})
    assert res.status_code == 400
    assert res.get_json()["message"] == "userId, title, and body are required"


def test_mark_as_read_only_own(client, auth_headers):
    note_id = client.post("/notifications", headers=auth_headers("admin"), json={
        "userId": "seller1", "title": "t", "body": "b",
    }).get_json()["data"]["notification"]["id"]

    assert client.put(f"/notifications/{note_id}/read", headers=auth_headers("buyer1")).status_code == 404
    res = client.put(f"/notifications/{note_id}/read", headers=auth_headers("seller1"))
    assert res.status_code == 200
    assert res.get_json()["data"]["notification"]["isRead"] is True


def test_preferences(client, auth_headers):
    me = auth_headers("seller1")
    prefs = client.get("/notifications/preferences", headers=me).get_json()["data"]["preferences"]
    assert all(prefs.values())

    res = client.put("/notifications/preferences", headers=me, json={"messageNotifications": False})
    assert res.get_json()["data"]["preferences"]["messageNotifications"] is False

    res = client.post("/notifications", headers=auth_headers("admin"), json={
        "userId": "seller1", "title": "New message", "body": "hi", "type": "message",
    })
    assert res.status_code == 200
    assert res.get_json()["data"]["success"] is False


def test_preferences_reject_unknown(client, auth_headers):
    res = client.put("/notifications/preferences", headers=auth_headers("seller1"), json={"smsNotifications": True})
    assert res.status_code == 400
