# tracksurvey/services/catalog.py
"""
Track catalog: the ordered list of tracks and their questions.
Loaded once from JSON and never modified afterwards.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from tracksurvey import config

logger = logging.getLogger(__name__)


class CatalogError(RuntimeError):
    """The catalog file is missing or does not describe a valid survey."""


# ---------- Models ----------

class Question(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    text: str
    type: Literal["likert", "text"]
    options: Optional[List[str]] = None  # only for likert

    @model_validator(mode="after")
    def _likert_needs_options(self) -> "Question":
        if self.type == "likert" and not self.options:
            raise ValueError(f"likert question {self.id!r} has no options")
        return self


class Track(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int
    title: str
    artist: str
    cover_url: str = Field(..., alias="coverUrl")
    audio_url: str = Field(..., alias="audioUrl")
    music_emotion: Optional[str] = Field(None, alias="musicEmotion")
    album_emotion: Optional[str] = Field(None, alias="albumEmotion")
    match_type: Optional[str] = Field(None, alias="matchType")
    questions: List[Question]


class Catalog:
    """Ordered, read-only collection of tracks."""

    def __init__(self, tracks: List[Track]):
        if not tracks:
            raise CatalogError("catalog has no tracks")
        ids = [t.id for t in tracks]
        if len(set(ids)) != len(ids):
            raise CatalogError(f"duplicate track ids in catalog: {ids}")
        self._tracks = tuple(tracks)

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._tracks

    def __len__(self) -> int:
        return len(self._tracks)

    def __getitem__(self, index: int) -> Track:
        return self._tracks[index]

    def __iter__(self):
        return iter(self._tracks)

    def by_id(self, track_id: int) -> Optional[Track]:
        for track in self._tracks:
            if track.id == track_id:
                return track
        return None

    def to_json(self) -> list[dict]:
        return [t.model_dump(by_alias=True, exclude_none=True) for t in self._tracks]


# ---------- Loading ----------

def load_catalog(path: str | Path) -> Catalog:
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CatalogError(f"catalog file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"catalog file is not valid JSON: {path}: {e}") from e

    if not isinstance(raw, list):
        raise CatalogError(f"catalog must be a JSON list of tracks: {path}")

    try:
        tracks = [Track.model_validate(item) for item in raw]
    except ValidationError as e:
        raise CatalogError(f"invalid track in {path}: {e}") from e

    logger.info("Loaded %d tracks from %s", len(tracks), path)
    return Catalog(tracks)


_catalog: Optional[Catalog] = None


def get_catalog() -> Catalog:
    """Catalog singleton, loaded on first use from CATALOG_PATH"""
    global _catalog
    if _catalog is None:
        _catalog = load_catalog(config.CATALOG_PATH)
    return _catalog
