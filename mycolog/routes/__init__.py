from flask import current_app, request

from mycolog import db


def json_payload() -> dict:
    """Request body as a dict, accepting JSON or form posts."""
    payload = request.get_json(silent=True)
    if payload is None:
        payload = request.form.to_dict()
    if not isinstance(payload, dict):
        raise ValueError("Request body must be an object")
    return payload


def validation_error(exc):
    db.session.rollback()
    return {"error": str(exc)}, 400


def backend_error(exc, context: str):
    """Roll back and report a database failure with the backend's own message."""
    db.session.rollback()
    current_app.logger.exception("%s failed", context)
    return {"error": f"{context} failed: {exc}"}, 500
