from flask import Blueprint

bp = Blueprint("leagues", __name__)

from pickem.routes.leagues import routes  # noqa: F401, E402 - registers routes on bp
