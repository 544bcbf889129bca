"""Logo relay: holds the image-generation credential server-side.

    POST /generate-logo  {"name", "industry", "tone"}  ->  {"image": "data:image/...;base64,..."}

Failures come back as a 500 with a short ``error`` message and a ``reason``.
The relay never retries, caches or rate-limits.
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

import errors
import log_setup
from config import Settings
from errors import ConfigurationError, LogoError
from logo_core import LogoRenderer, image_backend

log = logging.getLogger(__name__)


def create_relay_app(
    settings: Optional[Settings] = None,
    renderer: Optional[LogoRenderer] = None,
) -> Flask:
    settings = settings or Settings.from_env()
    renderer = renderer or LogoRenderer(image_backend(settings))

    app = Flask(__name__)
    CORS(app)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "provider": settings.image_provider})

    @app.post("/generate-logo")
    def generate_logo():
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400

        name = str(body.get("name") or "").strip()
        industry = str(body.get("industry") or "").strip()
        tone = str(body.get("tone") or "").strip()
        if not name:
            return jsonify({"error": "name is required"}), 400

        try:
            image = renderer.render(name, industry, tone)
        except ConfigurationError as exc:
            log.error("Relay misconfigured: %s", exc)
            return jsonify({"error": str(exc), "reason": errors.CONFIGURATION}), 500
        except LogoError as exc:
            return jsonify({"error": exc.message, "reason": exc.reason}), 500
        except Exception:
            log.exception("Relay crashed rendering logo for %r", name)
            return jsonify({"error": "Server crashed", "reason": errors.UPSTREAM_ERROR}), 500

        return jsonify({"image": image})

    return app


if __name__ == "__main__":
    _settings = Settings.from_env()
    log_setup.configure(_settings.log_level, component="relay")
    print(f"\n  Logo relay → http://localhost:{_settings.relay_port}/generate-logo\n")
    create_relay_app(_settings).run(host="0.0.0.0", port=_settings.relay_port, threaded=True)
