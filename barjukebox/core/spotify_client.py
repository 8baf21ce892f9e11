"""Spotify Web API client via Spotipy (client credentials, catalog lookups only)."""
from typing import Optional

from barjukebox.config import SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET, SPOTIFY_MARKET


def get_spotify_client(
    client_id: str = SPOTIFY_CLIENT_ID,
    client_secret: str = SPOTIFY_CLIENT_SECRET,
) -> Optional["Spotify"]:
    """Return a Spotipy client for catalog search, or None if credentials are not set."""
    if not client_id or not client_secret:
        return None
    from spotipy import Spotify
    from spotipy.oauth2 import SpotifyClientCredentials

    auth = SpotifyClientCredentials(client_id=client_id, client_secret=client_secret)
    return Spotify(auth_manager=auth, requests_timeout=5, retries=0)


def search_track(sp, title: str, artist: str) -> Optional[dict]:
    """Return the best matching track for title/artist, or None.

    Returns e.g. {"name": ..., "artists": "A, B", "album": ..., "release_date": "1997-05-12",
    "popularity": 71}.
    """
    if not title or not artist:
        return None
    result = sp.search(
        q=f"track:{title} artist:{artist}",
        type="track",
        limit=1,
        market=SPOTIFY_MARKET,
    )
    items = ((result or {}).get("tracks") or {}).get("items") or []
    if not items:
        return None
    track = items[0]
    album = track.get("album") or {}
    return {
        "name": track.get("name") or title,
        "artists": ", ".join(a.get("name", "") for a in track.get("artists") or []) or artist,
        "album": album.get("name") or "",
        "release_date": album.get("release_date") or "",
        "popularity": int(track.get("popularity") or 0),
    }
