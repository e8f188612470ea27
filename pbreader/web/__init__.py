from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from sentry_sdk.integrations.flask import FlaskIntegration

from .. import config

# Create limiter at import time so routes can use decorators; init with app later
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],
    storage_uri=config.limiter_storage_uri(),
)


def create_app(overrides: Optional[Dict[str, Any]] = None) -> Flask:
    config.init_sentry([FlaskIntegration()])

    app = Flask(__name__)
    app.config["SECRET_KEY"] = config.secret_key()
    app.config["MAX_CONTENT_LENGTH"] = config.max_upload_bytes()
    if overrides:
        app.config.update(overrides)

    limiter.init_app(app)

    from .routes import bp

    app.register_blueprint(bp)

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"ok": False, "error": e.description}), 400

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"ok": False, "error": e.description}), 404

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"ok": False, "error": "File too large"}), 413

    @app.errorhandler(500)
    def server_error(e):  # pragma: no cover
        return jsonify({"ok": False, "error": "Internal server error"}), 500

    return app
