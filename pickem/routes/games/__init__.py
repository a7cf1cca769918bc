from flask import Blueprint

bp = Blueprint("games", __name__)

from pickem.routes.games import routes  # noqa: F401, E402 - registers routes on bp
