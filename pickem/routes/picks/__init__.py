from flask import Blueprint

bp = Blueprint("picks", __name__)

from pickem.routes.picks import routes  # noqa: F401, E402 - registers routes on bp
