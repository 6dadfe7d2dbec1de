# Overview: Flask API route for DBF uploads; hands the bytes to the intake pipeline.

from flask import Blueprint, current_app, request

from ..decorators import api_route, ok
from ..services import tracker
from ..validation import InvalidInput


imports_bp = Blueprint("imports", __name__, url_prefix="/api")


@imports_bp.post("/upload-dbf")
@api_route("Failed to ingest DBF upload")
def upload_dbf_route():
    """
    Multipart upload, field "file". One file = one location.

    Response: {ok, location, inserted, skipped, held}
    """
    if not request.mimetype or request.mimetype != "multipart/form-data":
        raise InvalidInput("Expected multipart/form-data")
    file = request.files.get("file")
    if file is None:
        raise InvalidInput("Missing file")

    result = tracker().intake.ingest(file.read())
    current_app.logger.info("Upload %r ingested for %s", file.filename, result.location)
    return ok(**result.to_dict())
