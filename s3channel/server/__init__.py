"""HTTP surface of the channel directory (FastAPI + uvicorn)."""

from s3channel.server.app import create_app, run_server
