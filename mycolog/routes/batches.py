from flask import Blueprint, current_app, request
from flask_login import login_required, current_user
from sqlalchemy.exc import SQLAlchemyError

from mycolog.routes import json_payload, validation_error, backend_error
from mycolog.services import BatchService, StorageError
from mycolog.services.batches import check_bulk_count
from mycolog.services.configs import get_user_configs
from mycolog.services.groups import group_batches
from mycolog.services.identifiers import generate_display_ids
from mycolog.services.lineage import ancestors, descendants, lineage
from mycolog.utils import parse_date, parse_quantity, require_text

bp = Blueprint("batches", __name__)


def _species_configs():
    return get_user_configs(current_user.id)["species"]


def _not_found():
    return {"error": "Batch not found"}, 404


@bp.route("/", methods=["GET"])
@login_required
def index():
    """All batches for the current user, newest first."""
    batches = BatchService.list_batches(current_user.id)
    return {"batches": [b.to_dict() for b in batches]}


@bp.route("/", methods=["POST"])
@login_required
def create():
    """Log a new operation (one batch, or several unit batches)."""
    try:
        payload = json_payload()
        batches = BatchService.create_batches(current_user.id, payload, _species_configs())
    except ValueError as exc:
        return validation_error(exc)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Create batch")

    return {"batches": [b.to_dict() for b in batches]}, 201


@bp.route("/display-ids", methods=["POST"])
@login_required
def preview_display_ids():
    """Preview the codes the next batches for a species/date would get."""
    try:
        payload = json_payload()
        species = require_text(payload, "species", "Species")
        created_date = parse_date(payload.get("createdDate"), "created date")
        if created_date is None:
            raise ValueError("Created date is required")
        count = check_bulk_count(int(payload.get("count", 1)))
        codes = generate_display_ids(
            current_user.id, species, created_date, _species_configs(), count
        )
    except (TypeError, ValueError) as exc:
        return validation_error(exc)
    return {"displayIds": codes}


@bp.route("/groups", methods=["GET"])
@login_required
def groups():
    """Batches grouped by date, then species and operation."""
    batches = BatchService.list_batches(current_user.id)
    return {"days": [day.to_dict() for day in group_batches(batches)]}


@bp.route("/groups", methods=["PUT"])
@login_required
def update_group():
    """Apply one species/date/quantity/operation edit to a whole group."""
    try:
        payload = json_payload()
        ids = payload.get("ids") or []
        created_date = parse_date(payload.get("createdDate"), "created date")
        if created_date is None:
            raise ValueError("Created date is required")
        members = BatchService.update_group(
            current_user.id,
            ids,
            species=payload.get("species"),
            created_date=created_date,
            quantity=parse_quantity(payload.get("quantity")),
            operation_type=payload.get("operationType"),
            species_configs=_species_configs(),
        )
    except ValueError as exc:
        return validation_error(exc)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Update group")

    return {"batches": [b.to_dict() for b in members]}


@bp.route("/groups", methods=["DELETE"])
@login_required
def delete_group():
    """Delete every batch of a group."""
    try:
        payload = json_payload()
        deleted = BatchService.delete_group(current_user.id, payload.get("ids") or [])
    except ValueError as exc:
        return validation_error(exc)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Delete group")

    return {"deleted": deleted}


@bp.route("/<batch_id>", methods=["GET"])
@login_required
def show(batch_id):
    batch = BatchService.get_batch(current_user.id, batch_id)
    if not batch:
        return _not_found()
    return {"batch": batch.to_dict()}


@bp.route("/<batch_id>", methods=["PUT"])
@login_required
def update(batch_id):
    """Edit fields, status or end date of a batch."""
    batch = BatchService.get_batch(current_user.id, batch_id)
    if not batch:
        return _not_found()

    try:
        payload = json_payload()
        result = BatchService.update_batch(batch, payload, _species_configs())
    except ValueError as exc:
        return validation_error(exc)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Update batch")

    expanded = len(result) > 1 or result[0].id != batch_id
    return {"batches": [b.to_dict() for b in result], "expanded": expanded}


@bp.route("/<batch_id>", methods=["DELETE"])
@login_required
def delete(batch_id):
    batch = BatchService.get_batch(current_user.id, batch_id)
    if not batch:
        return _not_found()

    try:
        BatchService.delete_batch(batch)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Delete batch")

    return {"deleted": 1}


@bp.route("/<batch_id>/expand", methods=["POST"])
@login_required
def expand(batch_id):
    """Split a multi-count batch into unit batches."""
    batch = BatchService.get_batch(current_user.id, batch_id)
    if not batch:
        return _not_found()

    try:
        payload = json_payload()
        count = int(payload.get("count") or batch.quantity)
        new_batches = BatchService.expand_batch(batch, count, _species_configs())
    except (TypeError, ValueError) as exc:
        return validation_error(exc)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Expand batch")

    return {"batches": [b.to_dict() for b in new_batches]}, 201


@bp.route("/<batch_id>/lineage", methods=["GET"])
@login_required
def show_lineage(batch_id):
    """Ancestor chain and descendant tree of a batch."""
    batches = BatchService.list_batches(current_user.id)
    batch = next((b for b in batches if b.id == batch_id), None)
    if not batch:
        return _not_found()

    return {
        "ancestors": [b.to_dict() for b in ancestors(batch, batches)],
        "descendants": [b.to_dict() for b in descendants(batch, batches)],
        "chain": [b.to_dict() for b in lineage(batch, batches)],
    }


@bp.route("/<batch_id>/images", methods=["POST"])
@login_required
def upload_image(batch_id):
    """Attach a photo to a batch.

    The file is stored first; if recording its URL fails the file stays
    behind unreferenced.
    """
    batch = BatchService.get_batch(current_user.id, batch_id)
    if not batch:
        return _not_found()

    file = request.files.get("file")
    if file is None:
        return {"error": "No file selected"}, 400

    store = current_app.extensions["image_store"]
    try:
        url = store.upload(current_user.id, batch.id, file)
        BatchService.add_image(batch, url)
    except StorageError as exc:
        return {"error": str(exc)}, 400
    except SQLAlchemyError as exc:
        return backend_error(exc, "Attach photo")

    return {"url": url, "batch": batch.to_dict()}, 201


@bp.route("/<batch_id>/images", methods=["DELETE"])
@login_required
def delete_image(batch_id):
    """Remove a photo from storage and from the batch."""
    batch = BatchService.get_batch(current_user.id, batch_id)
    if not batch:
        return _not_found()

    try:
        url = require_text(json_payload(), "url", "Photo URL")
    except ValueError as exc:
        return validation_error(exc)
    if url not in (batch.image_urls or []):
        return {"error": "Photo not found on this batch"}, 404

    store = current_app.extensions["image_store"]
    try:
        store.delete(url)
        BatchService.remove_image(batch, url)
    except StorageError as exc:
        return {"error": str(exc)}, 500
    except SQLAlchemyError as exc:
        return backend_error(exc, "Remove photo")

    return {"batch": batch.to_dict()}
