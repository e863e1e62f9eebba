"""
Player remote-control API endpoints.
Translates remote button presses into playback controller operations.
"""
from fastapi import APIRouter, Request, HTTPException

from broadcaster.rate_limit import limiter, REMOTE_LIMIT
from broadcaster.services.session import BroadcasterSession, get_session

router = APIRouter(prefix="/api/player", tags=["player"])


def player_state(session: BroadcasterSession) -> dict:
    """Serialize the controller snapshot for the remote."""
    snapshot = session.controller.snapshot()
    channel = snapshot.current_channel
    return {
        "configured": session.config is not None,
        "server": session.config.base_url if session.config else None,
        "status": snapshot.state.status.value,
        "message": snapshot.state.message,
        "channels": [c.model_dump() for c in snapshot.channels],
        "selected_index": snapshot.selected_index,
        "display_number": snapshot.display_number,
        "current_channel": channel.model_dump() if channel else None,
        "overlay_visible": snapshot.overlay_visible,
        "retry_count": snapshot.retry_count,
        "is_playing": session.player.is_playing,
    }


async def _configured_session() -> BroadcasterSession:
    session = await get_session()
    if session.config is None:
        raise HTTPException(status_code=409, detail="No server configured")
    return session


@router.get("/state")
async def get_player_state():
    """Current playback state, channel list and selection."""
    session = await get_session()
    return player_state(session)


@router.post("/channel/{index}")
@limiter.limit(REMOTE_LIMIT)
async def change_channel(index: int, request: Request):
    """
    Tune to a channel by its 0-based position.
    The on-screen number is index + 1.
    """
    session = await _configured_session()
    if not 0 <= index < len(session.registry):
        raise HTTPException(status_code=404, detail="Channel not found")
    await session.controller.change_channel(index)
    return player_state(session)


@router.post("/up")
@limiter.limit(REMOTE_LIMIT)
async def channel_up(request: Request):
    session = await _configured_session()
    await session.controller.channel_up()
    return player_state(session)


@router.post("/down")
@limiter.limit(REMOTE_LIMIT)
async def channel_down(request: Request):
    session = await _configured_session()
    await session.controller.channel_down()
    return player_state(session)


@router.post("/retry")
@limiter.limit(REMOTE_LIMIT)
async def retry(request: Request):
    """Select-button retry after a stream error."""
    session = await _configured_session()
    await session.controller.retry()
    return player_state(session)


@router.post("/toggle")
@limiter.limit(REMOTE_LIMIT)
async def toggle_play_pause(request: Request):
    session = await _configured_session()
    session.controller.toggle_play_pause()
    return player_state(session)


@router.post("/overlay")
@limiter.limit(REMOTE_LIMIT)
async def show_overlay(request: Request):
    session = await _configured_session()
    session.controller.show_overlay()
    return player_state(session)
