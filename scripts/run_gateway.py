"""
Web Gateway Launcher

Starts the TFS web UI (browse page + /download gateway) against a running master.

Usage:
    python scripts/run_gateway.py --master-url http://127.0.0.1:19998 --port 19999
"""
import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from client.master_client import MasterClient
from client.storage_client import StorageClient
from shared import config
from shared.logging_config import setup_logging
from web.app import create_app


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the TFS web gateway")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=config.WEB_PORT)
    parser.add_argument("--master-url", default=config.MASTER_BASE_URL)
    parser.add_argument("--timeout", type=float, default=config.CLIENT_TIMEOUT_SECONDS)
    parser.add_argument("--buffer-size", type=int, default=config.STREAM_BUFFER_BYTES)
    parser.add_argument("--log-level", default=config.LOG_LEVEL)
    parser.add_argument("--log-file", default=None)
    args = parser.parse_args()

    logger = setup_logging("web", level=args.log_level, log_file=args.log_file)
    logger.info(f"Using master at {args.master_url}")

    app = create_app(
        MasterClient(args.master_url, timeout_seconds=args.timeout),
        storage_client=StorageClient(timeout_seconds=args.timeout),
        buffer_size=args.buffer_size,
    )
    app.run(host=args.host, port=args.port, threaded=True)


if __name__ == "__main__":
    main()
