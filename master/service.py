"""
Master Service Entrypoint

FastAPI application for the master. On startup it opens the namespace
database, builds the MasterInfo shared by the API and the data plane, and
starts the data server in a background thread.
"""
import warnings
warnings.filterwarnings('ignore', category=DeprecationWarning, module='sqlalchemy')

from fastapi import FastAPI
import logging

from master.api import files
from master.database import create_session_factory
from master.master_info import MasterInfo
from shared import config
from shared.types import NetAddress
from worker.block_store import BlockStore
from worker.data_handler import DataServer

logger = logging.getLogger(__name__)

app = FastAPI(title="TFS Master Service")

app.include_router(files.router)

# Global data server instance
data_server = None


@app.on_event("startup")
def startup_init():
    """Initialize namespace database and start the data plane"""
    global data_server

    session_factory = create_session_factory(config.DATABASE_URL)
    master_info = MasterInfo(
        session_factory=session_factory,
        master_address=NetAddress(config.MASTER_HOSTNAME, config.MASTER_DATA_PORT),
    )
    files.set_master_info(master_info)

    logger.info("Starting data server...")
    data_server = DataServer(
        host=config.MASTER_HOSTNAME,
        port=config.MASTER_DATA_PORT,
        master_info=master_info,
        block_store=BlockStore(config.UNDERFS_ROOT, config.CACHE_ROOT),
    )
    data_server.start_in_background()

    logger.info("Master service startup complete")


@app.on_event("shutdown")
def shutdown_cleanup():
    """Stop data server on shutdown"""
    if data_server:
        logger.info("Stopping data server...")
        data_server.stop()

    logger.info("Master service shutdown complete")


@app.get("/")
def root():
    return {
        "service": "master",
        "message": "TFS master metadata service running",
    }
