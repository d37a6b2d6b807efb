"""Ring Director launcher. Starts the control API under uvicorn."""

import argparse
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

ROOT = Path(__file__).parent
load_dotenv(ROOT / ".env")


def main():
    from ring_director.config import load_config
    from ring_director.logging_config import setup_logging

    config = load_config()

    parser = argparse.ArgumentParser(description="Ring Director: storyline engine and control API")
    parser.add_argument("--state-dir", type=Path, default=None,
                        help=f"State directory (default: {config.state_dir})")
    parser.add_argument("--host", default=config.api_host)
    parser.add_argument("--port", type=int, default=config.api_port)
    parser.add_argument("--log-level", default=config.log_level)
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    args = parser.parse_args()

    # The app factory re-reads the environment, so the override travels through it.
    if args.state_dir:
        os.environ["STATE_DIR"] = str(args.state_dir.resolve())

    setup_logging(args.log_level)
    print(f"Starting Ring Director on http://localhost:{args.port} ...")
    uvicorn.run(
        "ring_director.app:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
