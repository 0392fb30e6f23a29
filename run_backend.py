#!/usr/bin/env python
"""Script to run the task manager backend server."""
import os
from pathlib import Path

import uvicorn

if __name__ == "__main__":
    os.chdir(Path(__file__).resolve().parent)
    uvicorn.run(
        "taskmanager.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8080")),
        reload=os.getenv("RELOAD", "false").lower() in {"1", "true", "yes", "on"},
    )
