"""
RSVP and guestbook submission endpoints.
"""
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from core.validation import coerce_limit, normalize_side
from models.services import EntryService
from schemas.submission import ErrorResponse, GuestbookList, GuestbookSubmission, OkResponse, RsvpSubmission

logger = logging.getLogger(__name__)
router = APIRouter(tags=["submissions"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

# Every failure leaves through the {ok: false, error} envelope
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def get_entry_service(request: Request) -> EntryService:
    """Wrap the adapter selected at startup (held on app.state)."""
    app = request.app
    adapter = getattr(app.state, "storage_adapter", None)
    if adapter is None:
        raise HTTPException(status_code=503, detail="Storage is not ready")
    return EntryService(adapter, offset_hours=app.state.settings.timezone_offset_hours)


async def read_payload(request: Request) -> Dict[str, Any]:
    """
    Accept JSON or form-encoded bodies. An empty body is an empty payload,
    so the required-field checks produce the error message.
    """
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return dict(form)

    body = await request.body()
    if not body.strip():
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid request body")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Invalid request body")
    return data


def _save_rsvp(service: EntryService, payload: Dict[str, Any], side: Optional[str] = None) -> OkResponse:
    data = RsvpSubmission.model_validate(payload)
    entry = service.build_rsvp(
        name=data.name,
        phone=data.phone,
        guests=data.guests,
        note=data.note,
        timestamp=data.timestamp,
        side=side if side is not None else data.side,
    )
    try:
        service.save(entry)
    except Exception as e:
        logger.error(f"RSVP save failed ({entry.collection}): {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Unable to save RSVP")
    return OkResponse()


def _save_guestbook(service: EntryService, payload: Dict[str, Any], side: Optional[str] = None) -> OkResponse:
    data = GuestbookSubmission.model_validate(payload)
    entry = service.build_guestbook(
        name=data.name,
        message=data.message,
        contact=data.contact,
        timestamp=data.timestamp,
        side=side if side is not None else data.side,
    )
    try:
        service.save(entry)
    except Exception as e:
        logger.error(f"Guestbook save failed ({entry.collection}): {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Unable to save guestbook entry")
    return OkResponse()


def _load_guestbook(request: Request, service: EntryService, side: Any, limit: Optional[int]) -> GuestbookList:
    side_key = normalize_side(side)
    cap = request.app.state.settings.guestbook_limit
    try:
        items = service.list_guestbook(side_key, coerce_limit(limit, cap))
    except Exception as e:
        logger.error(f"Guestbook fetch failed (side={side_key}): {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Unable to load guestbook")
    return GuestbookList(items=[item.model_dump(include={"timestamp", "name", "contact", "message"}) for item in items])


# ========== Generic routes (side optional, in body / query) ==========

@router.post("/submissions/rsvp", response_model=OkResponse, responses=ERROR_RESPONSES)
async def submit_rsvp(
    payload: Dict[str, Any] = Depends(read_payload),
    service: EntryService = Depends(get_entry_service),
):
    """Record one RSVP."""
    return _save_rsvp(service, payload)


@router.post("/submissions/guestbook", response_model=OkResponse, responses=ERROR_RESPONSES)
async def submit_guestbook(
    payload: Dict[str, Any] = Depends(read_payload),
    service: EntryService = Depends(get_entry_service),
):
    """Record one guestbook message."""
    return _save_guestbook(service, payload)


@router.get("/submissions/guestbook", response_model=GuestbookList, responses=ERROR_RESPONSES)
async def list_guestbook(
    request: Request,
    side: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    service: EntryService = Depends(get_entry_service),
):
    """Most recent guestbook messages first, capped at GUESTBOOK_LIMIT."""
    return _load_guestbook(request, service, side, limit)


# ========== Side-scoped routes (/api/rsvp/groom, /api/guestbook/bride, ...) ==========

@router.post("/api/rsvp/{side}", response_model=OkResponse, responses=ERROR_RESPONSES)
async def submit_rsvp_for_side(
    side: str,
    payload: Dict[str, Any] = Depends(read_payload),
    service: EntryService = Depends(get_entry_service),
):
    normalize_side(side)
    return _save_rsvp(service, payload, side=side)


@router.post("/api/guestbook/{side}", response_model=OkResponse, responses=ERROR_RESPONSES)
async def submit_guestbook_for_side(
    side: str,
    payload: Dict[str, Any] = Depends(read_payload),
    service: EntryService = Depends(get_entry_service),
):
    normalize_side(side)
    return _save_guestbook(service, payload, side=side)


@router.get("/api/guestbook/{side}", response_model=GuestbookList, responses=ERROR_RESPONSES)
async def list_guestbook_for_side(
    request: Request,
    side: str,
    limit: Optional[int] = Query(None, ge=1),
    service: EntryService = Depends(get_entry_service),
):
    return _load_guestbook(request, service, side, limit)
