import logging

from flask import jsonify
from flask_login import current_user, login_required

from pickem import db, limiter
from pickem.errors import APIError, conflict
from pickem.forms import validate_json_form
from pickem.forms.auth import LoginForm, RegistrationForm
from pickem.models import User
from pickem.routes.auth import bp

logger = logging.getLogger(__name__)


@bp.route("/register", methods=["POST"])
@limiter.limit("5 per hour")
def register():
    form = validate_json_form(RegistrationForm)

    email = form.email.data.strip().lower()
    username = form.username.data.strip()

    existing = User.query.filter(
        db.or_(User.email == email, User.username == username)
    ).first()
    if existing:
        raise conflict("User with this email or username already exists")

    user = User(
        email=email,
        username=username,
        first_name=form.first_name.data or None,
        last_name=form.last_name.data or None,
    )
    user.set_password(form.password.data)

    db.session.add(user)
    db.session.commit()

    logger.info(f"Registered user {user.id} ({user.username})")

    return (
        jsonify(
            {
                "message": "User registered successfully",
                "token": user.generate_auth_token(),
                "user": user.to_dict(),
            }
        ),
        201,
    )


@bp.route("/login", methods=["POST"])
@limiter.limit("10 per minute")
def login():
    form = validate_json_form(LoginForm)

    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if user is None:
        raise APIError("Invalid email or password", 401)

    if not user.is_active:
        raise APIError("Account is deactivated", 401)

    if not user.check_password(form.password.data):
        logger.warning(f"Failed login for user {user.id}")
        raise APIError("Invalid email or password", 401)

    user.update_last_login()
    db.session.commit()

    return jsonify(
        {
            "message": "Login successful",
            "token": user.generate_auth_token(),
            "user": user.to_dict(),
        }
    )


@bp.route("/me")
@login_required
def me():
    """Get current user profile and the leagues they belong to"""
    return jsonify(
        {
            "user": current_user.to_dict(),
            "leagues": [league.to_dict() for league in current_user.get_leagues()],
        }
    )
