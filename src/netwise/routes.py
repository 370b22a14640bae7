"""HTTP routes that connect the browser page to the NetWise engine."""

from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from .dispatcher import InputDispatcher
from .layout import dot_class, sound_icon

router = APIRouter()


class Submission(BaseModel):
    text: Optional[str] = None


def _view_to_dict(app, since: Optional[int] = None) -> dict:
    """Converts the current view snapshot to a JSON-serializable dict."""
    snapshot = app.view.snapshot()
    if since is not None and since == snapshot.revision:
        return {"revision": snapshot.revision, "changed": False}

    return {
        "revision": snapshot.revision,
        "changed": True,
        "messages": app.layout_builder.build_messages(snapshot.entries),
        "typing": snapshot.typing,
        "status": snapshot.status,
        "label": snapshot.label,
        "dot_class": dot_class(snapshot.status),
        "sound_on": snapshot.sound_on,
        "sound_icon": sound_icon(snapshot.sound_on),
        "ping_count": snapshot.ping_count,
    }


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Serve the page."""
    return HTMLResponse(request.app.page)


@router.get("/api/view")
async def get_view(
    request: Request,
    since: Optional[int] = Query(None, description="Last revision the page drew"),
):
    """Return the view state, or only its revision when nothing changed."""
    return _view_to_dict(request.app, since)


@router.post("/api/messages")
async def send_message(submission: Submission, request: Request):
    """Queue the user's text for the engine."""
    if InputDispatcher.normalize(submission.text) is None:
        return {"accepted": False}
    return {"accepted": request.app.submit(submission.text) is not None}


@router.post("/api/clear")
async def clear_transcript(request: Request):
    """Reset the transcript to the welcome notice."""
    request.app.clear_transcript()
    return _view_to_dict(request.app)


@router.post("/api/sound")
async def toggle_sound(request: Request):
    """Flip the message-arrival sound."""
    sound_on = request.app.view.toggle_sound()
    return {"sound_on": sound_on, "sound_icon": sound_icon(sound_on)}
