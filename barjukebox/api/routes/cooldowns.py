"""Songs on cooldown, with a countdown for the DJ screen."""
from fastapi import APIRouter, Depends

from barjukebox.api.state import AppState, get_state, require_dj
from barjukebox.core.cooldown_ledger import format_remaining, remaining_ms

router = APIRouter()


@router.get("/")
def list_cooldowns(
    state: AppState = Depends(get_state),
    _token: str = Depends(require_dj),
):
    """Cooldowns, latest deadline first."""
    now = state.coordinator.now()
    return [
        {
            "id": c.song_id,
            "title": c.title,
            "artist": c.artist,
            "cooldown_until": c.cooldown_until,
            "remaining": format_remaining(remaining_ms(c, now)),
        }
        for c in state.coordinator.list_cooldowns()
    ]
