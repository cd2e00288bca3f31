"""Run the proxy with uvicorn: ``python -m genproxy``."""

import uvicorn

from genproxy.config import settings

if __name__ == "__main__":
    uvicorn.run("genproxy.main:app", host="0.0.0.0", port=settings.port)
