"""Entry point for running the FastAPI application with Uvicorn."""
from __future__ import annotations

import os

import uvicorn


def main() -> None:
  port = int(os.getenv("PORT", "5000"))
  reload = os.getenv("UVICORN_RELOAD", "false").lower() == "true"
  uvicorn.run("ireporter.main:app", host="0.0.0.0", port=port, reload=reload, log_level=os.getenv("LOG_LEVEL", "info"))


if __name__ == "__main__":
  main()
