"""
App assembly entry point.

Re-exports the FastAPI `app` from `tracker.api.main` so `uvicorn app:app`
works from the repository root.
"""

import os

from tracker.api.main import app  # noqa: F401

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
