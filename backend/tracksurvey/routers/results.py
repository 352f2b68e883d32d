# tracksurvey/routers/results.py
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, Response
import json
import logging

from tracksurvey.services.storage import LocalStorage, get_storage
from tracksurvey.services.submissions import (
    list_submissions,
    read_submission,
    tabulate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/results", tags=["results"])


# ---------- Helpers ----------

def _load_or_404(storage: LocalStorage, filename: str) -> dict:
    try:
        record = read_submission(storage, filename)
    except (OSError, ValueError):
        logger.exception("Failed to read submission %s", filename)
        raise HTTPException(status_code=500, detail="Failed to load submission")
    if record is None:
        raise HTTPException(status_code=404, detail="Submission not found")
    return record


# ---------- Routes ----------

@router.get("")
def list_results(storage: LocalStorage = Depends(get_storage)):
    """All submissions, newest first. No directory means no submissions."""
    try:
        submissions = list_submissions(storage)
    except OSError:
        logger.exception("Failed to list submissions in %s", storage.base_dir)
        return JSONResponse(status_code=500, content={"error": "Failed to load results"})
    return {"submissions": submissions}


@router.get("/{filename}")
def get_result(filename: str, storage: LocalStorage = Depends(get_storage)):
    return _load_or_404(storage, filename)


@router.get("/{filename}/table")
def get_result_table(filename: str, storage: LocalStorage = Depends(get_storage)):
    """Track-by-question grid for the admin viewer."""
    return tabulate(_load_or_404(storage, filename))


@router.get("/{filename}/download")
def download_result(filename: str, storage: LocalStorage = Depends(get_storage)):
    record = _load_or_404(storage, filename)
    body = json.dumps(record["data"], ensure_ascii=False, indent=2)
    return Response(
        content=body.encode("utf-8"),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{record["filename"]}"'},
    )
