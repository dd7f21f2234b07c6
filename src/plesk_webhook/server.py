"""Flask application exposing the cert-manager webhook solver API."""

from __future__ import annotations

import logging

from flask import Flask, Response, jsonify, request

from plesk_webhook.config import AppConfig
from plesk_webhook.dispatcher import ChallengeDispatcher
from plesk_webhook.models import ChallengeRequest, ChallengeResponse, InvalidChallengeRequest

logger = logging.getLogger(__name__)


def create_app(config: AppConfig, dispatcher: ChallengeDispatcher) -> Flask:
    """Build the routed application.

    Routes live under ``/apis/<group>/<version>``, which is where cert-manager
    calls the solver named ``<solver>``.
    """
    app = Flask(__name__)
    base_path = f"/apis/{config.group_name}/{config.solver_version}"

    @app.post(f"{base_path}/{config.solver_name}")
    def solve_challenge():
        body = request.get_json(silent=True)
        logger.info("Received POST request with the following payload: %r", body)
        try:
            challenge = ChallengeRequest.from_envelope(body)
        except InvalidChallengeRequest as exc:
            logger.warning("Rejecting undecodable challenge request: %s", exc)
            response = ChallengeResponse.failure(f"Invalid challenge request: {exc}", code=400)
            return jsonify(response.to_envelope()), 400

        response = dispatcher.dispatch(challenge)
        return jsonify(response.to_envelope())

    # cert-manager and the API aggregation layer query these; discovery is not served
    @app.get(base_path)
    @app.get(f"{base_path}/")
    @app.get(f"{base_path}/<path:subpath>")
    def not_implemented(subpath: str | None = None):
        return jsonify(ChallengeResponse.not_implemented().to_envelope())

    @app.after_request
    def log_request(response: Response) -> Response:
        logger.info(
            "Request: %s %s from %s. Status: %d",
            request.method,
            request.path,
            request.remote_addr or "unknown",
            response.status_code,
        )
        return response

    return app
