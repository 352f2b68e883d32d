import pytest
from fastapi.testclient import TestClient

from tracksurvey.main import app
from tracksurvey.services.catalog import Catalog, Track, get_catalog
from tracksurvey.services.storage import LocalStorage, get_storage

TRACKS = [
    {
        "id": 1,
        "title": "First",
        "artist": "A",
        "coverUrl": "/c/1.jpg",
        "audioUrl": "/a/1.mp3",
        "questions": [
            {"id": "q1_1", "text": "Fit?", "type": "likert", "options": ["1", "2", "3", "4", "5"]},
            {"id": "q1_2", "text": "Mood?", "type": "text"},
        ],
    },
    {
        "id": 2,
        "title": "Second",
        "artist": "B",
        "coverUrl": "/c/2.jpg",
        "audioUrl": "/a/2.mp3",
        "questions": [
            {"id": "q2_1", "text": "Fit?", "type": "likert", "options": ["1", "2", "3", "4", "5"]},
        ],
    },
    {
        "id": 3,
        "title": "Third",
        "artist": "C",
        "coverUrl": "/c/3.jpg",
        "audioUrl": "/a/3.mp3",
        "matchType": "mismatch",
        "questions": [
            {"id": "q3_1", "text": "Thoughts?", "type": "text"},
        ],
    },
]


@pytest.fixture
def catalog():
    return Catalog([Track.model_validate(t) for t in TRACKS])


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "submissions")


@pytest.fixture
def client(storage, catalog):
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_catalog] = lambda: catalog
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
