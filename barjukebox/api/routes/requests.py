"""Customer song requests and the DJ's play action."""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from barjukebox.api.state import AppState, get_state, require_dj
from barjukebox.config import ENRICHMENT_WAIT_SEC
from barjukebox.core.enrichment import wait_for_fact
from barjukebox.core.errors import InvalidSong, SongNotFound, SongRejected
from barjukebox.models.song import CooldownSong, SongRequest

router = APIRouter()


class SongBody(BaseModel):
    title: str
    artist: str


def _request_to_dict(r: SongRequest) -> dict:
    return {
        "id": r.song_id,
        "title": r.title,
        "artist": r.artist,
        "request_count": r.request_count,
    }


def _cooldown_to_dict(c: CooldownSong) -> dict:
    return {
        "id": c.song_id,
        "title": c.title,
        "artist": c.artist,
        "request_count": c.request_count,
        "cooldown_until": c.cooldown_until,
    }


@router.get("/")
def list_requests(state: AppState = Depends(get_state)):
    """Top requests, most requested first."""
    return [_request_to_dict(r) for r in state.coordinator.list_requests()]


@router.post("/", status_code=201)
def create_request(body: SongBody, state: AppState = Depends(get_state)):
    """Request a song. The fun fact is included if it arrives in time, otherwise null."""
    try:
        receipt = state.coordinator.request_song(body.title, body.artist)
    except InvalidSong as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SongRejected as e:
        raise HTTPException(status_code=409, detail={"reason": e.reason, "message": str(e)})
    fact = wait_for_fact(receipt.fact, ENRICHMENT_WAIT_SEC)
    return {"request": _request_to_dict(receipt.request), "fact": fact}


@router.post("/{song_id}/play")
def play_request(
    song_id: str,
    state: AppState = Depends(get_state),
    _token: str = Depends(require_dj),
):
    """Mark a request as played; it goes on cooldown. A stale id is a quiet no-op."""
    try:
        cooldown = state.coordinator.play_song(song_id)
    except SongNotFound:
        return {"ok": False, "reason": "not_found"}
    return {"ok": True, "cooldown": _cooldown_to_dict(cooldown)}
