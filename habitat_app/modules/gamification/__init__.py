from flask import Blueprint

gamification_api_bp = Blueprint(
    'gamification_api',
    __name__,
    url_prefix='/api'
)

from . import routes  # noqa: E402,F401
