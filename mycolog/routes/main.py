from flask import Blueprint, current_app, send_from_directory, abort
from flask_login import login_required, current_user

bp = Blueprint("main", __name__)


@bp.route("/")
def index():
    """Service banner, used by clients to check they reach the API."""
    return {
        "name": "mycolog",
        "authenticated": current_user.is_authenticated,
        "assistant": current_app.extensions["assistant"].is_configured,
    }


@bp.route("/media/<path:filename>")
@login_required
def media(filename):
    """Serve a stored photo; users only see their own folder."""
    owner = filename.split("/", 1)[0]
    if owner != str(current_user.id):
        abort(404)
    store = current_app.extensions["image_store"]
    return send_from_directory(store.root, filename)
