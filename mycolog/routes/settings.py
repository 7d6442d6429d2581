from datetime import date

from flask import Blueprint, Response, current_app, request
from flask_login import login_required, current_user
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from mycolog import db
from mycolog.routes import json_payload, validation_error, backend_error
from mycolog.services import BatchService, StorageError
from mycolog.services.configs import get_user_configs, save_user_configs
from mycolog.services.export import export_batches_csv, parse_batches_csv
from mycolog.utils import parse_date

bp = Blueprint("settings", __name__)


@bp.route("/configs", methods=["GET"])
@login_required
def get_configs():
    """Species, operations, statuses, recipe types and language."""
    return get_user_configs(current_user.id)


@bp.route("/configs", methods=["PUT"])
@login_required
def save_configs():
    """Save the configuration; renamed species are rewritten on every batch."""
    try:
        saved = save_user_configs(current_user.id, json_payload())
    except ValueError as exc:
        return validation_error(exc)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Save configuration")
    return saved


@bp.route("/export.csv")
@login_required
def export_csv():
    """Download every batch as CSV."""
    batches = BatchService.list_batches(current_user.id)
    if not batches:
        return {"error": "No data to export"}, 404

    filename = f"mushroom_logs_{date.today().isoformat()}.csv"
    return Response(
        export_batches_csv(batches),
        mimetype="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@bp.route("/import", methods=["POST"])
@login_required
def import_csv():
    """Load batches from a previously exported CSV file."""
    file = request.files.get("file")
    if file is None or not file.filename:
        return {"error": "No file selected"}, 400

    try:
        rows = parse_batches_csv(file.read().decode("utf-8-sig"))
        species = get_user_configs(current_user.id)["species"]
        batches = BatchService.import_rows(current_user.id, rows, species)
    except (UnicodeDecodeError, ValueError) as exc:
        return validation_error(exc)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Import")

    return {"imported": len(batches)}, 201


@bp.route("/test-connection", methods=["POST"])
@login_required
def test_connection():
    """Check database and photo storage connectivity; returns {ok, message}."""
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Database connectivity check failed")
        return {"ok": False, "message": f"Database unreachable: {exc}"}

    ok, message = current_app.extensions["image_store"].health()
    if not ok:
        return {"ok": False, "message": message}
    return {"ok": True, "message": "Database and photo storage are reachable."}


@bp.route("/storage/health")
@login_required
def storage_health():
    ok, message = current_app.extensions["image_store"].health()
    return {"ok": ok, "message": message}


@bp.route("/storage/cleanup", methods=["POST"])
@login_required
def storage_cleanup():
    """Delete the current user's photos stored before a date."""
    try:
        cutoff = parse_date(json_payload().get("before"), "cutoff date")
        if cutoff is None:
            raise ValueError("Cutoff date is required")
    except ValueError as exc:
        return validation_error(exc)

    try:
        removed = current_app.extensions["image_store"].delete_before(current_user.id, cutoff)
    except (OSError, StorageError) as exc:
        current_app.logger.exception("Photo cleanup failed")
        return {"error": f"Cleanup failed: {exc}"}, 500

    return {"removed": removed}
