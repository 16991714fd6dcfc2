from datetime import datetime, timezone

from flask import Blueprint, current_app

from .response import STATUS, response

bp = Blueprint("health", __name__)


@bp.get("/")
def root():
    """
    API status
    ---
    tags:
      - Health
    responses:
      200:
        description: API is running
    """
    return response(STATUS.OK, {
        "code": "success",
        "message": "API is running",
        "type": "success",
        "data": {
            "status": "ok",
            "version": current_app.config["API_VERSION"],
            "docs": current_app.config["DOCS_URL"],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    })


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
    """
    return {"status": "ok", "version": current_app.config["API_VERSION"]}, 200
