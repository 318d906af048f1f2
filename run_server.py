#!/usr/bin/env python3
"""Start the search aggregator API under uvicorn."""

import argparse

import uvicorn
from dotenv import load_dotenv

load_dotenv()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Search aggregator API server")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to listen on")
    parser.add_argument("--port", type=int, default=8000, help="Port to listen on")
    parser.add_argument("--reload", action="store_true", help="Restart on code changes (development only)")
    args = parser.parse_args(argv)

    # factory so each reload builds a fresh app and dependency singletons
    uvicorn.run(
        "server.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
