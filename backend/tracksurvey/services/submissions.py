# tracksurvey/services/submissions.py
from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import StrictInt, StrictStr, TypeAdapter, confloat

from tracksurvey.services.storage import LocalStorage

logger = logging.getLogger(__name__)

FiniteFloat = confloat(strict=True, allow_inf_nan=False)

# track id -> question id -> answer
SurveyResponses = Dict[str, Dict[str, Union[StrictInt, FiniteFloat, StrictStr]]]
responses_adapter = TypeAdapter(SurveyResponses)

FALLBACK_ADDRESS = "local-development-ip"
UNKNOWN_TIMESTAMP = "unknown"

_ADDRESS_UNSAFE = re.compile(r"[^A-Za-z0-9-]")
_SUBMISSION_NAME = re.compile(r"^[A-Za-z0-9_\-]+\.json$")


# ---------- Naming ----------

def client_address(headers: Mapping[str, str], peer: Optional[str] = None) -> str:
    """
    Best guess at the caller's address.
    Proxies put the original client first in the forwarded-for list.
    """
    for header in ("x-forwarded-for", "x-vercel-forwarded-for"):
        forwarded = headers.get(header)
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first
    return peer or FALLBACK_ADDRESS


def sanitize_address(address: str) -> str:
    """
    '203.0.113.7' -> '203-0-113-7', '::1' -> '--1'.
    Anything outside [A-Za-z0-9-] becomes '-', so the result is a bare file name.
    """
    return _ADDRESS_UNSAFE.sub("-", address) or "unknown-ip"


def utc_stamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y%m%d_%H%M%S")


def submission_filename(address: str,
                        with_timestamp: bool = False,
                        now: Optional[datetime] = None) -> str:
    base = sanitize_address(address)
    if with_timestamp:
        base = f"{base}_{utc_stamp(now)}"
    return f"{base}.json"


def timestamp_from_filename(filename: str) -> str:
    """
    '10-0-0-1_20251019_093000.json' -> '20251019_093000'.
    Names without an underscore have no embedded timestamp.
    """
    if "_" not in filename:
        return UNKNOWN_TIMESTAMP
    return "_".join(filename.split("_")[-2:]).replace(".json", "")


def is_submission_filename(filename: str) -> bool:
    return bool(_SUBMISSION_NAME.match(filename))


# ---------- Writer ----------

def save_submission(storage: LocalStorage,
                    address: str,
                    responses: Dict[str, Any],
                    with_timestamp: bool = False,
                    now: Optional[datetime] = None) -> str:
    """
    Write the answer set to <sanitized-address>[_<stamp>].json, replacing
    any earlier file of the same name. Returns the filename.
    """
    filename = submission_filename(address, with_timestamp, now)
    storage.write_json(filename, responses)
    logger.info("Saved submission %s (%d tracks)", filename, len(responses))
    return filename


# ---------- Reader ----------

def _record(filename: str, data: Any) -> Dict[str, Any]:
    return {
        "filename": filename,
        "timestamp": timestamp_from_filename(filename),
        "data": data,
    }


def list_submissions(storage: LocalStorage) -> List[Dict[str, Any]]:
    """
    Every *.json submission, newest first.
    Files that cannot be parsed are skipped.
    """
    records = []
    for name in storage.list_dir():
        if not name.endswith(".json"):
            continue
        try:
            data = storage.read_json(name)
        except ValueError as e:  # bad JSON, bad UTF-8, non-finite numbers
            logger.warning("Skipping unreadable submission %s: %s", name, e)
            continue
        records.append(_record(name, data))

    records.sort(key=lambda r: r["timestamp"], reverse=True)
    return records


def read_submission(storage: LocalStorage, filename: str) -> Optional[Dict[str, Any]]:
    """A single submission record, or None if there is no such file."""
    if not is_submission_filename(filename) or not storage.exists(filename):
        return None
    return _record(filename, storage.read_json(filename))


# ---------- Tabulation ----------

def _track_sort_key(track_id: str):
    try:
        return (0, float(track_id), track_id)
    except ValueError:
        return (1, 0.0, track_id)


def tabulate(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Lay a submission out as a grid: one row per track (numeric order),
    one column per question id seen on any track. Missing cells are '-'.
    """
    data = record["data"] if isinstance(record["data"], dict) else {}
    data = {tid: (a if isinstance(a, dict) else {}) for tid, a in data.items()}
    track_ids = sorted(data.keys(), key=_track_sort_key)
    question_ids = sorted({qid for tid in track_ids for qid in data[tid]})

    rows = []
    for tid in track_ids:
        answers = data[tid]
        rows.append({
            "trackId": tid,
            "answers": {qid: answers.get(qid, "-") for qid in question_ids},
        })

    return {
        "filename": record["filename"],
        "timestamp": record["timestamp"],
        "questionIds": question_ids,
        "rows": rows,
    }
