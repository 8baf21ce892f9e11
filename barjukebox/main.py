"""Entry: start API server (cooldown sweep and store watching run inside it)."""
import logging
import uvicorn

from barjukebox.config import API_HOST, API_PORT

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    uvicorn.run(
        "barjukebox.api.app:create_app",
        factory=True,
        host=API_HOST,
        port=API_PORT,
        reload=True,
    )
