"""
Entrypoint for running the API in development.
"""
import os
from . import create_app

# Respect APP_ENV for configuration selection (handled in get_config())
app = create_app()

if __name__ == "__main__":
    # Dev-friendly defaults; in production run via a WSGI server (gunicorn/uwsgi)
    host = os.getenv("FLASK_RUN_HOST", "0.0.0.0")
    port = int(os.getenv("FLASK_RUN_PORT", os.getenv("PORT", "3000")))
    debug = bool(os.getenv("FLASK_DEBUG", str(app.config.get("DEBUG", True))).lower() in ("1", "true", "yes"))
    app.run(host=host, port=port, debug=debug)
