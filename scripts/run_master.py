"""
Master Service Launcher

Starts the TFS master: the namespace API (FastAPI) plus the data plane that
serves file bytes from the local block store.

Usage:
    python scripts/run_master.py --host 127.0.0.1 --port 19998 --data-port 29998

Environment Variables:
    TFS_MASTER_HOSTNAME: Bind/advertised host (default: 127.0.0.1)
    TFS_MASTER_API_PORT: Namespace API port (default: 19998)
    TFS_MASTER_DATA_PORT: Data plane port (default: 29998)
    TFS_DATABASE_URL: Namespace database (default: sqlite:///./master/data/tfs.db)
    TFS_UNDERFS_ROOT / TFS_CACHE_ROOT: Block store tiers
"""
import argparse
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import uvicorn


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the TFS master service")
    parser.add_argument("--host", default=os.getenv("TFS_MASTER_HOSTNAME", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("TFS_MASTER_API_PORT", "19998")))
    parser.add_argument("--data-port", type=int, default=int(os.getenv("TFS_MASTER_DATA_PORT", "29998")))
    parser.add_argument("--underfs-root", default=os.getenv("TFS_UNDERFS_ROOT", "./data/underfs"))
    parser.add_argument("--cache-root", default=os.getenv("TFS_CACHE_ROOT", "./data/cache"))
    parser.add_argument("--log-level", default=os.getenv("TFS_LOG_LEVEL", "INFO"))
    args = parser.parse_args()

    print("=" * 60)
    print("TFS Master Service")
    print("=" * 60)
    print(f"API Address: {args.host}:{args.port}")
    print(f"Data Address: {args.host}:{args.data_port}")
    print(f"Under storage: {args.underfs_root}")
    print("=" * 60)

    # Set environment variables before shared.config is imported by the service
    os.environ["TFS_MASTER_HOSTNAME"] = args.host
    os.environ["TFS_MASTER_API_PORT"] = str(args.port)
    os.environ["TFS_MASTER_DATA_PORT"] = str(args.data_port)
    os.environ["TFS_UNDERFS_ROOT"] = args.underfs_root
    os.environ["TFS_CACHE_ROOT"] = args.cache_root

    from shared.logging_config import setup_logging
    setup_logging("master", level=args.log_level)

    uvicorn.run("master.service:app", host=args.host, port=args.port, reload=False)


if __name__ == "__main__":
    main()
