"""
Bearer token authentication for the API.

Flask-Login resolves current_user through load_user_from_request on every
request; tokens are issued by User.generate_auth_token at register/login.
"""

from flask import jsonify

from pickem.models import User


def load_user_from_request(request):
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return User.verify_auth_token(token.strip())


def unauthorized():
    return jsonify({"error": "Access token required"}), 401
