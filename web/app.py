"""
Web UI application factory.

Routes:
- GET /download?path=...: stream a file from the cluster
- GET /browse?path=...: show a path's attributes and a download link
- GET /healthz
"""
import logging
from typing import Optional

from flask import Blueprint, Flask, Response, current_app, jsonify, redirect, render_template, request, url_for

from client.storage_client import StorageClient
from shared.exceptions import FileDoesNotExistError, InvalidPathError
from shared.types import ReadType
from web.download import DownloadServlet, report_error, resolve_request_path

logger = logging.getLogger(__name__)

bp = Blueprint("web", __name__)


class FlaskResponseSink:
    """ResponseSink over a Flask response whose body has not been set yet"""

    def __init__(self, response: Response):
        self.response = response

    def set_content_type(self, content_type: str) -> None:
        self.response.content_type = content_type

    def set_content_length(self, length: int) -> None:
        self.response.content_length = length

    def add_header(self, name: str, value: str) -> None:
        self.response.headers.add(name, value)


def _servlet() -> DownloadServlet:
    return current_app.extensions["tfs_download"]


def _render_browse(path: str, invalid_path_error: Optional[str] = None, file_info=None):
    return render_template(
        "browse.html",
        currentPath=path,
        invalidPathError=invalid_path_error,
        fileInfo=file_info,
    )


@bp.route("/")
def index():
    return redirect(url_for("web.browse"))


@bp.route("/healthz")
def healthz():
    return jsonify({"status": "ok"})


@bp.route("/browse")
def browse():
    path = resolve_request_path(request.args.get("path"))
    try:
        info = _servlet().lookup(path)
    except (FileDoesNotExistError, InvalidPathError) as e:
        return _render_browse(path, report_error(e).message)
    return _render_browse(info.path, file_info=info)


@bp.route("/download")
def download():
    raw_path = request.args.get("path")
    response = current_app.response_class()
    try:
        transfer = _servlet().prepare(raw_path, FlaskResponseSink(response))
    except (FileDoesNotExistError, InvalidPathError) as e:
        record = report_error(e)
        logger.info(f"Download of {record.path} rejected: {record.message}")
        return _render_browse(resolve_request_path(raw_path), record.message)

    response.response = iter(transfer)
    response.call_on_close(transfer.close)
    return response


def create_app(master_info, storage_client: Optional[StorageClient] = None,
               read_type: ReadType = ReadType.NO_CACHE, buffer_size: Optional[int] = None) -> Flask:
    """
    Build the web UI around an injected metadata authority.

    Args:
        master_info: MasterInfo (in-process) or MasterClient (remote master)
        storage_client: Data-plane client; defaults to a new StorageClient
        read_type: Read policy for downloads
        buffer_size: Copy chunk size override
    """
    app = Flask(__name__)
    kwargs = {"storage_client": storage_client, "read_type": read_type}
    if buffer_size:
        kwargs["buffer_size"] = buffer_size
    app.extensions["tfs_download"] = DownloadServlet(master_info, **kwargs)
    app.register_blueprint(bp)
    return app
