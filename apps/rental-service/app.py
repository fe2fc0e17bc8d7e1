"""
App assembly entry point.

Re-exports the FastAPI `app` from `rental.api.main` so `uvicorn app:app` works
from the service directory.
"""

from rental.api.main import app  # noqa: F401

if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run("app:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")), reload=False)
