"""
Tests for routes/capture.py — server-side microphone capture.
"""

from unittest.mock import patch

from tests.fakes import gemini_response

POST = "providers.stt.gemini_provider.requests.post"


def test_state(client):
    body = client.get("/api/capture/state").get_json()
    assert body["state"] == "idle"
    assert body["view"] == "recognition"
    assert body["selected_phrase"]["id"] == 1


def test_training_capture_saves_recording(client, capture_source):
    resp = client.post("/api/capture/start", json={"view": "training", "phrase_id": 7})
    assert resp.status_code == 200
    assert resp.get_json()["state"] == "recording"

    resp = client.post("/api/capture/stop")
    assert resp.status_code == 200
    outcome = resp.get_json()
    assert outcome["view"] == "training"
    assert outcome["recording"]["phraseId"] == 7
    assert capture_source.streams[0].released

    recordings = client.get("/api/recordings?phrase_id=7").get_json()["recordings"]
    assert len(recordings) == 1
    assert client.get("/api/capture/state").get_json()["state"] == "idle"


def test_recognition_capture_transcribes(client):
    client.put("/api/credential", json={"api_key": "AIza-test"})
    client.post("/api/capture/start", json={"view": "recognition"})
    with patch(POST, return_value=gemini_response("Mach bitte das Fenster auf.")):
        resp = client.post("/api/capture/stop")
    assert resp.status_code == 200
    assert resp.get_json() == {"view": "recognition", "text": "Mach bitte das Fenster auf."}


def test_recognition_without_credential(client):
    client.post("/api/capture/start", json={"view": "recognition"})
    resp = client.post("/api/capture/stop")
    assert resp.status_code == 428
    assert client.get("/api/capture/state").get_json()["state"] == "idle"


def test_denied_microphone(client, capture_source):
    capture_source.deny = True
    resp = client.post("/api/capture/start", json={})
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "microphone_denied"
    assert client.get("/api/capture/state").get_json()["state"] == "error"


def test_double_start(client):
    client.post("/api/capture/start", json={})
    resp = client.post("/api/capture/start", json={})
    assert resp.status_code == 409


def test_stop_without_start(client):
    resp = client.post("/api/capture/stop")
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "invalid_state"


def test_unknown_phrase(client):
    resp = client.post("/api/capture/start", json={"view": "training", "phrase_id": 424242})
    assert resp.status_code == 404


def test_unknown_view(client):
    resp = client.post("/api/capture/start", json={"view": "karaoke"})
    assert resp.status_code == 400
