"""
Flask REST API for NetPolGen.

Provides endpoints for generating network policies from network
neighborhood documents and for querying the known server registry.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any

from flask import Flask, jsonify, request

from ..config import GeneratorConfig
from ..knownservers import KnownServersFinder
from ..neighborhood import NetworkNeighborhood, network_neighborhoods_from_document
from ..policy import PolicyGenerationError, generate_network_policies, generate_network_policy
from ..policy.models import parse_timestamp

logger = logging.getLogger(__name__)

MALFORMED = (AttributeError, KeyError, TypeError, ValueError)


def _json_object() -> dict[str, Any] | None:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _timestamp(data: dict[str, Any]) -> datetime:
    ts = data.get("timestamp")
    return parse_timestamp(ts) if ts else datetime.now(timezone.utc)


def create_app(
    known_servers: KnownServersFinder | None = None,
    config: GeneratorConfig | None = None,
) -> Flask:
    """Create and configure the Flask application."""

    app = Flask(__name__)

    finder = known_servers if known_servers is not None else KnownServersFinder()
    generator_config = config or GeneratorConfig()

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "healthy", "timestamp": time.time()})

    # --- Network policies ---

    @app.route("/api/v1/networkpolicy/generate", methods=["POST"])
    def networkpolicy_generate():
        data = _json_object()
        if data is None:
            return jsonify({"error": "JSON object body required"}), 400
        document = data.get("neighborhood")
        if not isinstance(document, dict):
            return jsonify({"error": "neighborhood required"}), 400

        try:
            nn = NetworkNeighborhood.from_dict(document)
            timestamp = _timestamp(data)
        except MALFORMED as e:
            return jsonify({"error": f"malformed request: {e}"}), 400

        try:
            policy = generate_network_policy(nn, finder, timestamp, generator_config)
        except PolicyGenerationError as e:
            logger.info("policy generation refused: %s", e)
            return jsonify({"error": str(e)}), 422

        return jsonify(policy.to_dict())

    @app.route("/api/v1/networkpolicy/generate-list", methods=["POST"])
    def networkpolicy_generate_list():
        data = _json_object()
        if data is None:
            return jsonify({"error": "JSON object body required"}), 400
        if data.get("neighborhoods") is None:
            return jsonify({"error": "neighborhoods required"}), 400

        try:
            nns = network_neighborhoods_from_document(data["neighborhoods"])
            timestamp = _timestamp(data)
        except MALFORMED as e:
            return jsonify({"error": f"malformed request: {e}"}), 400

        try:
            policies = generate_network_policies(nns, finder, timestamp, generator_config)
        except PolicyGenerationError as e:
            logger.info("policy generation refused: %s", e)
            return jsonify({"error": str(e)}), 422

        return jsonify(policies.to_dict())

    # --- Known servers ---

    @app.route("/api/v1/knownservers", methods=["GET"])
    def knownservers_list():
        return jsonify({
            "summary": finder.summary(),
            "entries": [e.to_dict() for e in finder.entries()],
        })

    @app.route("/api/v1/knownservers/lookup", methods=["POST"])
    def knownservers_lookup():
        data = _json_object()
        if data is None:
            return jsonify({"error": "JSON object body required"}), 400
        ip = data.get("ip", "")
        if not ip:
            return jsonify({"error": "ip required"}), 400
        entries, found = finder.contains(ip)
        return jsonify({
            "ip": ip,
            "found": found,
            "entries": [e.to_dict() for e in entries],
        })

    return app
