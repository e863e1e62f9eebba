"""
Server connection API endpoints.
"""
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from broadcaster.routers.player import player_state
from broadcaster.services.session import BroadcasterSession, get_session

router = APIRouter(prefix="/api/server", tags=["server"])


class ConnectRequest(BaseModel):
    host: str = ""
    port: str = Field("12121", description="Port as typed by the user")


def connection_state(session: BroadcasterSession) -> dict:
    connection = session.connection
    return {
        "host": connection.host,
        "port": connection.port,
        "connected": connection.is_connected,
        "connecting": connection.is_connecting,
        "error": connection.error_message,
        "base_url": session.config.base_url if session.config else None,
    }


@router.get("")
async def get_server():
    """Saved server inputs and connection status."""
    session = await get_session()
    return connection_state(session)


@router.post("/connect")
async def connect(request: ConnectRequest):
    """Validate a server and start playback from it."""
    session = await get_session()
    config = await session.connect(request.host, request.port)
    if config is None:
        raise HTTPException(status_code=400, detail=session.connection.error_message)
    return {**connection_state(session), "player": player_state(session)}


@router.post("/production")
async def connect_production():
    """Connect to the public Broadcaster server."""
    session = await get_session()
    config = await session.connect_production()
    if config is None:
        raise HTTPException(status_code=400, detail=session.connection.error_message)
    return {**connection_state(session), "player": player_state(session)}


@router.post("/disconnect")
async def disconnect():
    """Stop playback and forget the saved server."""
    session = await get_session()
    await session.disconnect()
    return connection_state(session)
