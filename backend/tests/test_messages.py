def test_messages_are_listed_chronologically(client, device):
    sent = []
    for text in ("first", "second", "third"):
        response = client.post("/api/messages", json={"content": text, "fromDevice": device["id"]})
        assert response.status_code == 200
        sent.append(response.json())

    listed = client.get("/api/messages").json()

    assert [m["content"] for m in listed] == ["first", "second", "third"]
    assert listed[-1]["id"] == sent[-1]["id"]
    assert listed[0]["fromDevice"] == device["id"]
    assert listed[0]["sentAt"]


def test_message_without_sender(client):
    response = client.post("/api/messages", json={"content": "hello"})

    assert response.status_code == 200
    assert response.json()["fromDevice"] is None


def test_empty_message_is_rejected(client):
    for content in ("", "   "):
        response = client.post("/api/messages", json={"content": content})
        assert response.status_code == 400
        assert response.json()["field"] == "content"


def test_message_content_keeps_whitespace(client):
    response = client.post("/api/messages", json={"content": "  spaced  "})

    assert response.json()["content"] == "  spaced  "


def test_message_from_unknown_device_is_rejected(client):
    response = client.post("/api/messages", json={"content": "hi", "fromDevice": 404})

    assert response.status_code == 400
    assert response.json()["field"] == "fromDevice"


def test_sent_message_is_broadcast(client):
    with client.websocket_connect("/ws") as ws:
        ws.receive_json()

        message = client.post("/api/messages", json={"content": "ping"}).json()

        assert ws.receive_json() == {"type": "new_message", "data": message}


def test_stored_timestamps_carry_utc_offset(client, device):
    client.post("/api/messages", json={"content": "hi", "fromDevice": device["id"]})

    message = client.get("/api/messages").json()[0]
    listed_device = client.get("/api/devices").json()[0]

    for value in (message["sentAt"], listed_device["lastSeen"]):
        assert value.endswith(("Z", "+00:00"))
