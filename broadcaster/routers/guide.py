"""
Program guide API endpoints.
Returns the guide already laid out so a renderer only has to draw.
"""
from fastapi import APIRouter, Request, HTTPException

from broadcaster.rate_limit import limiter, REMOTE_LIMIT
from broadcaster.services.guide import GuideService
from broadcaster.services.session import get_session

router = APIRouter(prefix="/api/guide", tags=["guide"])


def guide_layout(guide: GuideService, channels: list) -> dict:
    """Serialize guide rows with block geometry in layout units."""
    layout = guide.layout
    day_start = guide.day_start_ms
    rows = []
    for row in guide.rows(channels):
        programs = []
        if row.guide_channel:
            for program in row.guide_channel.schedule:
                programs.append({
                    "id": program.id,
                    "title": program.title,
                    "start_time": program.start_ms,
                    "end_time": program.end_ms,
                    "duration": program.formatted_duration,
                    "is_current": program.is_current,
                    "x": layout.block_position(program, day_start),
                    "width": layout.block_width(program),
                })
        rows.append({
            "number": row.index + 1,
            "name": row.channel.name,
            "slug": row.channel.slug,
            "programs": programs,
        })

    return {
        "visible": guide.visible,
        "loading": guide.is_loading,
        "error": guide.error_message,
        "day_start": day_start,
        "current_time": guide.current_time_ms,
        "now_line": guide.now_line_position,
        "initial_scroll_offset": guide.initial_scroll_offset,
        "total_width": layout.total_width,
        "row_height": layout.row_height,
        "channel_column_width": layout.channel_column_width,
        "time_markers": [
            {"position": m.position, "label": m.label} for m in guide.time_markers()
        ],
        "rows": rows,
    }


@router.get("")
async def get_guide():
    """Guide layout for the current channel list."""
    session = await get_session()
    return guide_layout(session.guide, list(session.registry.channels))


@router.post("/open")
@limiter.limit(REMOTE_LIMIT)
async def open_guide(request: Request):
    """Show the guide: loads the schedule and starts the now-line clock."""
    session = await get_session()
    if session.config is None:
        raise HTTPException(status_code=409, detail="No server configured")
    await session.guide.open_guide()
    return guide_layout(session.guide, list(session.registry.channels))


@router.post("/close")
@limiter.limit(REMOTE_LIMIT)
async def close_guide(request: Request):
    session = await get_session()
    session.guide.close_guide()
    return {"visible": False}
