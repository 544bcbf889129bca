"""BrandCraft Flask web application."""

from __future__ import annotations

import json
import logging
from typing import Optional

from flask import Flask, Response, jsonify, render_template, request
from flask_cors import CORS

import log_setup
from brand_core import BrandGenerator
from config import Settings
from errors import (
    ConfigurationError,
    GenerationError,
    InvalidInputError,
    LogoError,
    QuizClosedError,
)
from logo_client import LogoClient
from logo_core import decode_data_uri
from models import Tone
from quiz import QUESTIONS
from state import TABS, AppState

log = logging.getLogger(__name__)

GENERATION_FAILED = "Failed to generate brand identity. Please try again."


def _json_object() -> dict:
    """The request's JSON body as a dict; an absent body counts as empty."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return body


def create_app(
    settings: Optional[Settings] = None,
    state: Optional[AppState] = None,
    generator: Optional[BrandGenerator] = None,
    logo_client: Optional[LogoClient] = None,
) -> Flask:
    settings = settings or Settings.from_env()
    state = state or AppState()
    generator = generator or BrandGenerator(settings)
    logo_client = logo_client or LogoClient(settings.relay_url, timeout=settings.request_timeout)

    app = Flask(__name__, template_folder="templates")
    CORS(app)
    app.extensions["brandcraft.state"] = state

    # ------------------------------------------------------------------
    # Error handlers
    # ------------------------------------------------------------------

    @app.errorhandler(InvalidInputError)
    def _invalid_input(exc: InvalidInputError):
        return jsonify({"error": str(exc), "fields": exc.fields}), 400

    @app.errorhandler(QuizClosedError)
    def _quiz_closed(exc: QuizClosedError):
        return jsonify({"error": str(exc)}), 409

    # ------------------------------------------------------------------
    # Routes: UI
    # ------------------------------------------------------------------

    @app.get("/")
    def index():
        return render_template(
            "index.html",
            tones=[t.value for t in Tone],
            tabs=TABS,
            total_questions=len(QUESTIONS),
        )

    @app.get("/api/state")
    def api_state():
        return jsonify(state.snapshot())

    # ------------------------------------------------------------------
    # Routes: Form & quiz
    # ------------------------------------------------------------------

    @app.patch("/api/inputs")
    def api_update_inputs():
        body = _json_object()
        inputs = state.update_inputs(**body)
        return jsonify(inputs.to_wire())

    @app.post("/api/quiz")
    def api_open_quiz():
        quiz = state.open_quiz()
        return jsonify(quiz.to_dict())

    @app.post("/api/quiz/answer")
    def api_answer_quiz():
        body = _json_object()
        value = body.get("value")
        if not isinstance(value, str) or not value:
            raise InvalidInputError("value is required", ["value"])
        try:
            step, view = state.answer_quiz(value)
        except ValueError as exc:
            raise InvalidInputError(str(exc), ["value"]) from exc
        if step.done:
            return jsonify({"finished": True, "personalitySummary": step.summary})
        return jsonify(view)

    @app.delete("/api/quiz")
    def api_close_quiz():
        state.close_quiz()
        return jsonify({"closed": True})

    @app.post("/api/tab")
    def api_select_tab():
        body = _json_object()
        state.select_tab(str(body.get("tab", "")))
        return jsonify({"activeTab": state.active_tab})

    # ------------------------------------------------------------------
    # Routes: Generation
    # ------------------------------------------------------------------

    @app.post("/api/generate")
    def api_generate():
        body = _json_object()
        if body:
            state.update_inputs(**body)
        ticket = state.begin_generation()

        try:
            result = generator.generate_brand_identity(ticket.inputs)
        except ConfigurationError as exc:
            log.error("Generation misconfigured: %s", exc)
            state.fail_generation(ticket.token, str(exc))
            return jsonify({"error": str(exc)}), 500
        except GenerationError as exc:
            log.warning("Generation failed (token %d): %s", ticket.token, exc)
            state.fail_generation(ticket.token, GENERATION_FAILED)
            return jsonify({"error": GENERATION_FAILED}), 502
        except Exception:
            log.exception("Unexpected generation failure (token %d)", ticket.token)
            state.fail_generation(ticket.token, GENERATION_FAILED)
            return jsonify({"error": GENERATION_FAILED}), 502

        if not state.complete_generation(ticket.token, result):
            return jsonify({"error": "superseded"}), 409
        return jsonify({"result": result.to_wire(), "logos": state.snapshot()["logos"]})

    @app.get("/api/export")
    def api_export():
        result = state.result
        if result is None:
            return jsonify({"error": "Nothing generated yet"}), 404
        return Response(
            json.dumps(result.to_wire(), indent=2),
            mimetype="application/json",
            headers={"Content-Disposition": 'attachment; filename="brand-identity.json"'},
        )

    # ------------------------------------------------------------------
    # Routes: Logos
    # ------------------------------------------------------------------

    @app.post("/api/logos")
    def api_generate_logo():
        body = _json_object()
        name = str(body.get("name") or "")
        try:
            ticket = state.begin_logo(name)
        except InvalidInputError as exc:
            return jsonify({"error": str(exc)}), 409

        try:
            image = logo_client.generate_logo(ticket.name, ticket.industry, ticket.tone)
        except LogoError as exc:
            state.fail_logo(ticket, exc)
            return jsonify({
                "error": exc.user_message,
                "reason": exc.reason,
                "retryable": exc.retryable,
            }), 502

        state.complete_logo(ticket, image)
        return jsonify({"name": name, "image": image})

    @app.get("/api/logos/<name>.png")
    def api_download_logo(name: str):
        image = state.logo_image(name)
        if image is None:
            return jsonify({"error": f"No logo ready for {name!r}"}), 404
        mime, data = decode_data_uri(image)
        extension = mime.split("/")[-1]
        return Response(
            data,
            mimetype=mime,
            headers={"Content-Disposition": f'attachment; filename="{name}-logo.{extension}"'},
        )

    return app


if __name__ == "__main__":
    _settings = Settings.from_env()
    log_setup.configure(_settings.log_level)
    print(f"\n  BrandCraft → http://localhost:{_settings.port}\n")
    create_app(_settings).run(host="0.0.0.0", port=_settings.port, debug=False, threaded=True)
