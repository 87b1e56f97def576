"""Status routes."""

import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from relayer.models import FinalizedItem, PendingItem
from relayer.storage import Store

logger = logging.getLogger(__name__)

router = APIRouter()


class StatusResponse(BaseModel):
    """Live view of the relayer queue."""

    pending: list[PendingItem]
    finalized: list[FinalizedItem]


def get_store(request: Request) -> Store:
    return request.app.state.store


@router.get(
    "/status",
    response_model=StatusResponse,
    response_model_by_alias=True,
    response_model_exclude_none=True,
)
def get_status(store: Store = Depends(get_store)):
    """Current pending queue and finalized history, read fresh from disk."""
    return StatusResponse(
        pending=store.load_pending(),
        finalized=store.load_finalized(),
    )


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
