# tests/test_shadowing_api.py
import os

import pytest
from fastapi.testclient import TestClient

from app.services.shadowing_service import parse_audio_filename
from app.utils.config import settings


def _touch(directory, *names):
    os.makedirs(directory, exist_ok=True)
    for name in names:
        with open(os.path.join(directory, name), "wb") as f:
            f.write(b"ID3")


@pytest.fixture
def source_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "shadowing_source_dir", str(tmp_path))
    return tmp_path


def test_parse_audio_filename():
    assert parse_audio_filename("3_Brian_Hello_world.mp3") == (3, "brian", "Hello world")
    assert parse_audio_filename("notes.txt") is None
    assert parse_audio_filename("intro_Brian_Hello.mp3") is None
    assert parse_audio_filename("1_Brian.mp3") is None


@pytest.mark.api
class TestParagraphListing:
    def test_first_page(self, client: TestClient):
        response = client.get("/api/shadowing")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == settings.shadowing_page_size
        assert data[0]["name"] == "Paragraph 01"
        assert set(data[0]) == {"id", "text", "url", "name"}

    def test_second_page(self, client: TestClient):
        data = client.get("/api/shadowing", params={"page": 2}).json()
        assert [p["name"] for p in data] == ["Paragraph 11", "Paragraph 12"]

    def test_page_past_the_end_is_empty(self, client: TestClient):
        assert client.get("/api/shadowing", params={"page": 5}).json() == []

    def test_invalid_page(self, client: TestClient):
        assert client.get("/api/shadowing", params={"page": 0}).status_code == 400


@pytest.mark.api
class TestSentenceListings:
    def test_describe_image_groups_voices_by_sentence(self, client: TestClient, source_dir):
        _touch(
            source_dir / "di",
            "2_Brian_Second_line.mp3",
            "1_Joanna_Hello_world.mp3",
            "1_Brian_Hello_world.mp3",
            "readme.txt",
        )
        response = client.get("/api/describe-image-shadowing")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "describe-image-1"
        assert data["name"] == "Describe Image Practice"
        assert [s["number"] for s in data["sentences"]] == [1, 2]
        assert data["sentences"][0] == {
            "number": 1,
            "text": "Hello world",
            "voices": {
                "brian": "/shadowingsource/di/1_Brian_Hello_world.mp3",
                "joanna": "/shadowingsource/di/1_Joanna_Hello_world.mp3",
            },
        }
        assert data["fullText"] == "Hello world Second line"
        assert data["availableVoices"] == ["brian", "joanna", "olivia"]

    def test_describe_image_directory_missing(self, client: TestClient, source_dir):
        response = client.get("/api/describe-image-shadowing")
        assert response.status_code == 404
        assert response.json()["detail"] == "Describe Image directory not found"

    def test_retell_lecture(self, client: TestClient, source_dir):
        _touch(source_dir / "retelllecture", "10_Olivia_Final_point.mp3", "9_Olivia_First_point.mp3")
        data = client.get("/api/retell-lecture").json()
        assert data["id"] == "retell-lecture-1"
        assert [s["number"] for s in data["sentences"]] == [9, 10]
        assert data["sentences"][1]["voices"] == {"olivia": "/shadowingsource/retelllecture/10_Olivia_Final_point.mp3"}

    def test_retell_lecture_directory_missing(self, client: TestClient, source_dir):
        response = client.get("/api/retell-lecture")
        assert response.status_code == 404
        assert response.json()["detail"] == "Retell lecture directory not found"

    def test_empty_directory_lists_nothing(self, client: TestClient, source_dir):
        os.makedirs(source_dir / "di")
        data = client.get("/api/describe-image-shadowing").json()
        assert data["sentences"] == []
        assert data["fullText"] == ""
