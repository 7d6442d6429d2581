from flask import Blueprint
from flask_login import login_user, logout_user, login_required, current_user

from mycolog import db
from mycolog.models import User
from mycolog.routes import json_payload
from mycolog.utils import is_valid_email

bp = Blueprint("auth", __name__)


@bp.route("/login", methods=["POST"])
def login():
    payload = json_payload()
    email = (payload.get("email") or "").strip()
    password = payload.get("password") or ""

    user = User.query.filter_by(email=email).first()

    if user and user.is_active and user.check_password(password):
        login_user(user, remember=bool(payload.get("remember")))
        return {"user": user.to_dict()}

    return {"error": "Invalid email or password"}, 401


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return {"ok": True}


@bp.route("/register", methods=["POST"])
def register():
    payload = json_payload()
    email = (payload.get("email") or "").strip()
    password = payload.get("password") or ""

    if not is_valid_email(email):
        return {"error": "Invalid email address."}, 400

    if len(password) < 8:
        return {"error": "Password must be at least 8 characters."}, 400

    if User.query.filter_by(email=email).first():
        return {"error": "Email already registered"}, 400

    user = User(email=email, display_name=(payload.get("displayName") or "").strip() or None)
    user.set_password(password)

    db.session.add(user)
    db.session.commit()

    login_user(user)
    return {"user": user.to_dict()}, 201


@bp.route("/me")
@login_required
def me():
    return {"user": current_user.to_dict()}
