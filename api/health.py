from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from models import storage
from utils.exceptions import StoreUnavailable

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            version:
              type: string
              example: 1.0.0
      503:
        description: Database unreachable
    """
    try:
        storage.get_session().execute(text("SELECT 1"))
    except OperationalError as exc:
        raise StoreUnavailable() from exc
    return {"status": "ok", "version": "1.0.0"}, 200
