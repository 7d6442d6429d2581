from flask import Blueprint, request
from flask_login import login_required, current_user
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from mycolog import db
from mycolog.models import Recipe, Note
from mycolog.routes import json_payload, validation_error, backend_error
from mycolog.utils import require_text

bp = Blueprint("notebook", __name__)


@bp.route("/recipes")
@login_required
def recipes():
    """List recipes, optionally filtered by ?q= over name, ingredients and directions."""
    query = Recipe.query.filter_by(user_id=current_user.id)
    search = request.args.get("q", "").strip()
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(
            Recipe.name.ilike(pattern),
            Recipe.ingredients.ilike(pattern),
            Recipe.directions.ilike(pattern),
        ))
    return {"recipes": [r.to_dict() for r in query.order_by(Recipe.name).all()]}


@bp.route("/recipes/<recipe_id>", methods=["PUT"])
@login_required
def save_recipe(recipe_id):
    """Create or update a recipe owned by the current user."""
    try:
        payload = json_payload()
        name = require_text(payload, "name", "Recipe name")
        recipe_type = require_text(payload, "type", "Recipe type")

        recipe = db.session.get(Recipe, recipe_id)
        if recipe and recipe.user_id != current_user.id:
            return {"error": "Recipe not found"}, 404
        if not recipe:
            recipe = Recipe(id=recipe_id, user_id=current_user.id)
            db.session.add(recipe)

        recipe.name = name
        recipe.type = recipe_type
        recipe.ingredients = payload.get("ingredients") or ""
        recipe.directions = payload.get("directions") or ""
        db.session.commit()
    except ValueError as exc:
        return validation_error(exc)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Save recipe")

    return {"recipe": recipe.to_dict()}


@bp.route("/recipes/<recipe_id>", methods=["DELETE"])
@login_required
def delete_recipe(recipe_id):
    try:
        deleted = Recipe.query.filter_by(id=recipe_id, user_id=current_user.id).delete()
        db.session.commit()
    except SQLAlchemyError as exc:
        return backend_error(exc, "Delete recipe")
    return {"deleted": deleted}


@bp.route("/notes")
@login_required
def notes():
    """List notes, optionally filtered by ?q= over title and body."""
    query = Note.query.filter_by(user_id=current_user.id)
    search = request.args.get("q", "").strip()
    if search:
        pattern = f"%{search}%"
        query = query.filter(or_(Note.name.ilike(pattern), Note.notes.ilike(pattern)))
    return {"notes": [n.to_dict() for n in query.order_by(Note.created_at.desc()).all()]}


@bp.route("/notes/<note_id>", methods=["PUT"])
@login_required
def save_note(note_id):
    """Create or update a note owned by the current user."""
    try:
        payload = json_payload()
        name = require_text(payload, "name", "Title")

        note = db.session.get(Note, note_id)
        if note and note.user_id != current_user.id:
            return {"error": "Note not found"}, 404
        if not note:
            note = Note(id=note_id, user_id=current_user.id)
            db.session.add(note)

        note.name = name
        note.notes = payload.get("notes") or ""
        db.session.commit()
    except ValueError as exc:
        return validation_error(exc)
    except SQLAlchemyError as exc:
        return backend_error(exc, "Save note")

    return {"note": note.to_dict()}


@bp.route("/notes/<note_id>", methods=["DELETE"])
@login_required
def delete_note(note_id):
    try:
        deleted = Note.query.filter_by(id=note_id, user_id=current_user.id).delete()
        db.session.commit()
    except SQLAlchemyError as exc:
        return backend_error(exc, "Delete note")
    return {"deleted": deleted}
