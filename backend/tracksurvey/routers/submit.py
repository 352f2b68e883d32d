# tracksurvey/routers/submit.py
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import json
import logging

from tracksurvey import config
from tracksurvey.services.storage import LocalStorage, get_storage
from tracksurvey.services.submissions import (
    client_address,
    responses_adapter,
    save_submission,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["submit"])


def _reject_constant(name: str):
    raise ValueError(f"{name} is not a valid answer")


@router.post("/submit")
async def submit_survey(request: Request, storage: LocalStorage = Depends(get_storage)):
    """
    Save a participant's full answer set as
    submissions/<sanitized-ip>[_<YYYYMMDD_HHMMSS>].json
    """
    raw = await request.body()
    if not raw.strip():
        raise HTTPException(status_code=400, detail="No submission data received.")

    try:
        responses = json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        raise HTTPException(status_code=400, detail="Submission body is not valid JSON.")

    if not isinstance(responses, dict) or not responses:
        raise HTTPException(status_code=400, detail="No submission data received.")

    try:
        responses_adapter.validate_python(responses)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=e.errors(include_url=False, include_context=False))

    peer = request.client.host if request.client else None
    address = client_address(request.headers, peer)

    try:
        filename = save_submission(
            storage,
            address,
            responses,
            with_timestamp=config.SUBMISSION_TIMESTAMPS,
        )
    except (OSError, ValueError):
        logger.exception("Failed to save submission from %s", address)
        return JSONResponse(
            status_code=500,
            content={"message": "Server error: the submission could not be saved."},
        )

    return {"message": "Survey submitted successfully.", "filename": filename}
