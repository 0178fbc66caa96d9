"""Launch the HTTP API with uvicorn."""
from __future__ import annotations

import uvicorn

from epic_allocator.web.api import app


def launch(db_path: str | None = None, port: int = 8000, host: str = "127.0.0.1") -> None:
    """Serve the API in the foreground until interrupted."""
    app.state.db_path = db_path
    print(f"API server:  http://{host}:{port}")
    print()
    uvicorn.run(app, host=host, port=port, log_level="warning")
