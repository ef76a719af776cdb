"""Run the Medora API with uvicorn. HOST / PORT come from the environment."""
import os
import signal
import sys

import uvicorn

from medora.core.config import settings


def _stop(sig, frame):
    print(f"\nReceived signal {sig}, stopping Medora API")
    sys.exit(0)


def main():
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    print(f"Medora API ({settings.ENVIRONMENT}) on http://{host}:{port}")
    uvicorn.run(
        "medora.main:app",
        host=host,
        port=port,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
