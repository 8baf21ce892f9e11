"""Bar jukebox: song requests, cooldowns and DJ blacklist."""
