"""
Tests for routes/recordings.py — upload, listing, playback handles.
"""

import io

import pytest


def _upload(client, phrase_id="1", data=b"RIFFaudio", mime="audio/wav"):
    return client.post(
        "/api/recordings",
        data={"phrase_id": phrase_id, "audio": (io.BytesIO(data), "clip", mime)},
        content_type="multipart/form-data",
    )


def test_upload_recording(client):
    resp = _upload(client, "4", mime="audio/webm")
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["phraseId"] == 4
    assert body["mimeType"] == "audio/webm"
    assert body["id"]


def test_upload_requires_phrase_id(client):
    resp = _upload(client, phrase_id="abc")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "phrase_missing"


def test_upload_requires_audio(client):
    resp = client.post("/api/recordings", data={"phrase_id": "1"}, content_type="multipart/form-data")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "audio_missing"


def test_upload_rejects_empty_audio(client):
    resp = _upload(client, data=b"")
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "audio_empty"


def test_list_and_play(client):
    _upload(client, "1", data=b"first", mime="audio/wav")
    recordings = client.get("/api/recordings").get_json()["recordings"]
    assert len(recordings) == 1
    rec = recordings[0]
    assert rec["phraseId"] == 1
    assert rec["size"] == 5

    audio = client.get(rec["audioUrl"])
    assert audio.status_code == 200
    assert audio.data == b"first"
    assert audio.mimetype == "audio/wav"


def test_list_filtered_by_phrase(client):
    _upload(client, "1")
    _upload(client, "2")
    recordings = client.get("/api/recordings?phrase_id=2").get_json()["recordings"]
    assert [r["phraseId"] for r in recordings] == [2]


def test_relisting_expires_old_urls(client):
    _upload(client, "1")
    old_url = client.get("/api/recordings").get_json()["recordings"][0]["audioUrl"]
    new_url = client.get("/api/recordings").get_json()["recordings"][0]["audioUrl"]
    assert old_url != new_url
    assert client.get(old_url).status_code == 404
    assert client.get(new_url).status_code == 200


def test_unknown_audio_token(client):
    resp = client.get("/api/audio/does-not-exist")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "not_found"


def test_orphaned_recording_still_listed(client):
    _upload(client, "6")
    client.delete("/api/phrases/6")
    recordings = client.get("/api/recordings").get_json()["recordings"]
    assert [r["phraseId"] for r in recordings] == [6]


def test_delete_recording(client):
    rec_id = _upload(client).get_json()["id"]
    assert client.delete(f"/api/recordings/{rec_id}").status_code == 204
    assert client.get("/api/recordings").get_json()["recordings"] == []


@pytest.mark.parametrize("rec_id", ["missing", "00000000-0000-0000-0000-000000000000"])
def test_delete_missing_recording(client, rec_id):
    assert client.delete(f"/api/recordings/{rec_id}").status_code == 404
