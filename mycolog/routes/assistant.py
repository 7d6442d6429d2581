from flask import Blueprint, current_app
from flask_login import login_required

from mycolog.routes import json_payload
from mycolog.services import AssistantError

bp = Blueprint("assistant", __name__)

FAILURE_MESSAGE = (
    "The assistant is unavailable right now. Please check your connection "
    "or API key and try again."
)


@bp.route("/ask", methods=["POST"])
@login_required
def ask():
    """Answer a cultivation question."""
    try:
        question = json_payload().get("question") or ""
        answer = current_app.extensions["assistant"].ask(question)
    except ValueError as exc:
        return {"error": str(exc)}, 400
    except AssistantError:
        current_app.logger.exception("Assistant request failed")
        return {"error": FAILURE_MESSAGE}, 502

    return {"answer": answer}
