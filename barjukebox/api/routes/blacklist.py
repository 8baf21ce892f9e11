"""DJ blacklist: list, add (manual entry or from a request), remove."""
from fastapi import APIRouter, Depends, HTTPException

from barjukebox.api.routes.requests import SongBody
from barjukebox.api.state import AppState, get_state, require_dj
from barjukebox.core.errors import InvalidSong
from barjukebox.models.song import BlacklistedSong

router = APIRouter()


def _blacklisted_to_dict(b: BlacklistedSong) -> dict:
    return {"id": b.song_id, "title": b.title, "artist": b.artist}


@router.get("/")
def list_blacklist(
    state: AppState = Depends(get_state),
    _token: str = Depends(require_dj),
):
    """Blacklisted songs sorted by title."""
    return [_blacklisted_to_dict(b) for b in state.coordinator.list_blacklist()]


@router.post("/", status_code=201)
def add_to_blacklist(
    body: SongBody,
    state: AppState = Depends(get_state),
    _token: str = Depends(require_dj),
):
    """Blacklist a song and drop any pending request for it. Re-adding is harmless."""
    try:
        record = state.coordinator.blacklist_song(body.title, body.artist)
    except InvalidSong as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _blacklisted_to_dict(record)


@router.delete("/{song_id}", status_code=204)
def remove_from_blacklist(
    song_id: str,
    state: AppState = Depends(get_state),
    _token: str = Depends(require_dj),
):
    """Allow a song to be requested again. Unknown ids are ignored."""
    state.coordinator.unblacklist_song(song_id)
