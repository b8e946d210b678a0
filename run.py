"""Single entry point for the OpenSDR HTTP API."""
import os
import logging
import uvicorn

logging.basicConfig(level=logging.INFO)

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    host = os.environ.get("HOST", "127.0.0.1")

    uvicorn.run(
        "opensdr.app:app",
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )
