from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from app.core.config import get_settings
from app.core.identity import InvalidIdentityError
from app.db.session import SessionLocal
from app.moderation import BlockGate, ModerationService

from .internal_access import assert_internal_access

router = APIRouter(tags=["internal", "moderation"])


class BlockStatusResponse(BaseModel):
    identity: str
    blocked: bool
    reason: str | None = None
    blocked_at: datetime | None = None


class BlockRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=512)


class BlockResponse(BaseModel):
    identity: str
    blocked_already: bool
    reason: str | None = None


class UnblockResponse(BaseModel):
    identity: str
    removed: bool


def _invalid_identity() -> HTTPException:
    return HTTPException(status_code=422, detail={"code": "E_INVALID_IDENTITY"})


@router.get("/internal/moderation/blocks/{identity}", response_model=BlockStatusResponse)
async def get_block_status(request: Request, identity: str) -> BlockStatusResponse:
    assert_internal_access(request, settings=get_settings(), scope="moderation")
    try:
        async with SessionLocal() as session:
            blocked = await BlockGate.get_blocked(session, identity)
    except InvalidIdentityError as exc:
        raise _invalid_identity() from exc

    if blocked is None:
        return BlockStatusResponse(identity=identity.strip(), blocked=False)
    return BlockStatusResponse(
        identity=str(blocked.identity),
        blocked=True,
        reason=blocked.reason,
        blocked_at=blocked.created_at,
    )


@router.put("/internal/moderation/blocks/{identity}", response_model=BlockResponse)
async def block_identity(request: Request, identity: str, payload: BlockRequest) -> BlockResponse:
    assert_internal_access(request, settings=get_settings(), scope="moderation")
    try:
        async with SessionLocal.begin() as session:
            result = await ModerationService.block_identity(
                session,
                identity=identity,
                reason=payload.reason,
            )
    except InvalidIdentityError as exc:
        raise _invalid_identity() from exc

    return BlockResponse(
        identity=str(result.identity),
        blocked_already=result.blocked_already,
        reason=result.reason,
    )


@router.delete("/internal/moderation/blocks/{identity}", response_model=UnblockResponse)
async def unblock_identity(request: Request, identity: str) -> UnblockResponse:
    assert_internal_access(request, settings=get_settings(), scope="moderation")
    try:
        async with SessionLocal.begin() as session:
            removed = await ModerationService.unblock_identity(session, identity=identity)
    except InvalidIdentityError as exc:
        raise _invalid_identity() from exc

    return UnblockResponse(identity=identity.strip(), removed=removed)
