from __future__ import annotations

from typing import List

from fastapi import APIRouter, HTTPException, Request

from ..errors import RoomNotFound
from ..registry import RoomRegistry
from ..schemas import HealthResponse, RoomSummary

router = APIRouter(prefix="", tags=["rooms"])


def _registry(request: Request) -> RoomRegistry:
    return request.app.state.registry


@router.get("/rooms", response_model=List[RoomSummary])
async def list_rooms(request: Request):
    return _registry(request).summaries()


@router.get("/rooms/{room_code}", response_model=RoomSummary)
async def get_room(room_code: str, request: Request):
    try:
        room = _registry(request).get(room_code.upper())
    except RoomNotFound as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    return room.summary()


@router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    return HealthResponse(rooms=len(_registry(request)))
