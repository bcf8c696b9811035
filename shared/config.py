"""
Environment-driven configuration shared by every TFS component.

All values can be overridden through TFS_* environment variables; the launch
scripts under scripts/ expose the same settings as command-line flags.
"""
import os


def _int_env(name: str, default: int) -> int:
    raw = str(os.getenv(name, str(default))).strip()
    try:
        return int(raw)
    except Exception:
        return default


def _str_env(name: str, default: str) -> str:
    return str(os.getenv(name, default)).strip() or default


# URI scheme used when addressing the master's data plane
SCHEME = "tfs://"

MASTER_HOSTNAME = _str_env("TFS_MASTER_HOSTNAME", "127.0.0.1")
MASTER_API_PORT = _int_env("TFS_MASTER_API_PORT", 19998)
MASTER_DATA_PORT = _int_env("TFS_MASTER_DATA_PORT", 29998)
WEB_PORT = _int_env("TFS_WEB_PORT", 19999)
MASTER_BASE_URL = _str_env("TFS_MASTER_BASE_URL", f"http://{MASTER_HOSTNAME}:{MASTER_API_PORT}")

DATABASE_URL = _str_env("TFS_DATABASE_URL", "sqlite:///./master/data/tfs.db")
UNDERFS_ROOT = _str_env("TFS_UNDERFS_ROOT", "./data/underfs")
CACHE_ROOT = _str_env("TFS_CACHE_ROOT", "./data/cache")

STREAM_BUFFER_BYTES = _int_env("TFS_STREAM_BUFFER_BYTES", 64 * 1024)
CLIENT_TIMEOUT_SECONDS = _int_env("TFS_CLIENT_TIMEOUT_SECONDS", 30)
LOG_LEVEL = _str_env("TFS_LOG_LEVEL", "INFO")
