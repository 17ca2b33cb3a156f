"""
Tests for routes/phrases.py
"""

import io

from training.seed import SEED_PHRASES


def test_list_seeded_phrases(client):
    resp = client.get("/api/phrases")
    assert resp.status_code == 200
    phrases = resp.get_json()["phrases"]
    assert len(phrases) == len(SEED_PHRASES)
    assert phrases[0] == {"id": 1, "text": "Ich habe Durst.", "lang": "de", "recordings": 0}


def test_recording_counts(client):
    for _ in range(2):
        client.post(
            "/api/recordings",
            data={"phrase_id": "2", "audio": (io.BytesIO(b"abc"), "a.webm", "audio/webm")},
            content_type="multipart/form-data",
        )
    phrases = {p["id"]: p for p in client.get("/api/phrases").get_json()["phrases"]}
    assert phrases[2]["recordings"] == 2
    assert phrases[1]["recordings"] == 0


def test_add_phrase(client):
    resp = client.post("/api/phrases", json={"text": "Gute Nacht.", "lang": "de"})
    assert resp.status_code == 201
    created = resp.get_json()
    assert created["text"] == "Gute Nacht."
    assert isinstance(created["id"], int)
    assert client.get("/api/phrases").get_json()["phrases"][0]["id"] == created["id"]


def test_add_phrase_default_lang(client):
    resp = client.post("/api/phrases", json={"text": "Hallo"})
    assert resp.get_json()["lang"] == "de"


def test_add_empty_phrase_rejected(client):
    resp = client.post("/api/phrases", json={"text": "   "})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_phrase"


def test_add_phrase_bad_lang(client):
    resp = client.post("/api/phrases", json={"text": "Hello", "lang": "en"})
    assert resp.status_code == 400


def test_add_phrase_requires_json(client):
    resp = client.post("/api/phrases", data="text=hi", content_type="application/x-www-form-urlencoded")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "invalid_body"


def test_delete_phrase(client):
    assert client.delete("/api/phrases/3").status_code == 204
    ids = [p["id"] for p in client.get("/api/phrases").get_json()["phrases"]]
    assert 3 not in ids


def test_delete_missing_phrase(client):
    resp = client.delete("/api/phrases/999999")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Phrase 999999 not found", "code": "not_found"}
