# tracksurvey/routers/tracks.py
from fastapi import APIRouter, Depends

from tracksurvey.services.catalog import Catalog, get_catalog

router = APIRouter(prefix="/api/tracks", tags=["tracks"])


@router.get("")
def list_tracks(catalog: Catalog = Depends(get_catalog)):
    """The survey's tracks, in presentation order."""
    return catalog.to_json()
