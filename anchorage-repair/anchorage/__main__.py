import uvicorn

from .config import CONFIG


if __name__ == "__main__":
    uvicorn.run("anchorage.app:app", host=CONFIG.host, port=CONFIG.port, log_level=CONFIG.log_level.lower())
