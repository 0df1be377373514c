"""Id directory endpoints.

The handlers are plain functions, so FastAPI runs them in its threadpool and
storage I/O never stalls the event loop serving relay sessions.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body

from syrja_broker.api.dependencies import DirectoryStoreDep
from syrja_broker.core.errors import DirectoryValidationError
from syrja_broker.core.settings import settings
from syrja_broker.schemas.directory import (
    ClaimIdRequest,
    ClaimIdResponse,
    DeleteIdRequest,
    DeleteIdResponse,
    IdByPubkeyResponse,
    InviteResponse,
    SuggestIdResponse,
)

router = APIRouter(tags=["directory"])


@router.post("/claim-id", response_model=ClaimIdResponse)
def claim_id(
    store: DirectoryStoreDep,
    payload: Annotated[ClaimIdRequest | None, Body()] = None,
) -> ClaimIdResponse:
    """Claim a new id or refresh one already owned by the caller's key."""
    payload = payload or ClaimIdRequest()
    entry = store.claim(
        payload.custom_id,
        payload.full_invite_code,
        payload.persistence,
        payload.pub_key,
    )
    return ClaimIdResponse(id=entry.id)


@router.get("/get-invite/{invite_id:path}", response_model=InviteResponse)
def get_invite(invite_id: str, store: DirectoryStoreDep) -> InviteResponse:
    """Resolve an id (namespace prefix omitted) to its invite code."""
    full_id = f"{settings.id_namespace_prefix}{invite_id}"
    return InviteResponse(full_invite_code=store.resolve(full_id))


@router.get("/get-id-by-pubkey/{pubkey:path}", response_model=IdByPubkeyResponse)
def get_id_by_pubkey(pubkey: str, store: DirectoryStoreDep) -> IdByPubkeyResponse:
    """Return the id currently owned by a public key."""
    entry = store.find_by_owner(pubkey)
    return IdByPubkeyResponse(id=entry.id, permanent=entry.permanent)


@router.post(
    "/delete-id",
    response_model=DeleteIdResponse,
    response_model_exclude_none=True,
)
def delete_id(
    store: DirectoryStoreDep,
    payload: Annotated[DeleteIdRequest | None, Body()] = None,
) -> DeleteIdResponse:
    """Delete the id owned by a public key; having none is not an error."""
    if payload is None or not payload.pub_key:
        raise DirectoryValidationError("Public key is required")
    if store.delete_by_owner(payload.pub_key):
        return DeleteIdResponse()
    return DeleteIdResponse(message="No ID found to delete")


@router.get("/suggest-id", response_model=SuggestIdResponse)
def suggest_id(store: DirectoryStoreDep) -> SuggestIdResponse:
    """Suggest a memorable id that nobody currently holds."""
    return SuggestIdResponse(id=store.suggest_id(settings.id_namespace_prefix))
