"""HTTP entrypoint exposing address validation and the validation history."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict

from flask import Flask, jsonify, request

from address_validator.core.config import ConfigError, get_settings
from address_validator.core.history import CorruptHistoryError, JsonHistoryStore
from address_validator.core.models import AddressInput
from address_validator.core.validation import AddressValidationService
from address_validator.jobs import flows

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)


@lru_cache(maxsize=1)
def get_service() -> AddressValidationService:
    return flows.build_service(get_settings())


@lru_cache(maxsize=1)
def get_store() -> JsonHistoryStore:
    return flows.build_store(get_settings())


# ---------- Routes ----------


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "history_file": settings.history_file_path,
                "max_history_size": settings.max_history_size,
            }
        ),
        200,
    )


@app.post("/validate")
def validate() -> Any:
    """
    Validate an address and store the attempt.
    JSON body: either {"query": "..."} or the structured fields
    address_line1, postal_code, city, country (+ optional address_line2/3).
    """
    payload: Dict[str, Any] = request.get_json(silent=True) or {}

    query = payload.get("query")
    if query is not None:
        if not str(query).strip():
            return jsonify({"error": "query cannot be empty"}), 400
        _, record = flows.validate_free_text(get_service(), get_store(), str(query))
        return jsonify({"data": record.to_dict()}), 200

    required = ("address_line1", "postal_code", "city", "country")
    missing = [f for f in required if not str(payload.get(f) or "").strip()]
    if missing:
        return jsonify({"error": f"missing fields: {', '.join(missing)}"}), 400

    address_input = AddressInput.from_dict(payload)
    _, record = flows.validate_new_address(get_service(), get_store(), address_input)
    return jsonify({"data": record.to_dict()}), 200


@app.get("/history")
def list_history() -> Any:
    limit_raw = request.args.get("limit")
    limit = get_settings().max_history_size
    if limit_raw is not None:
        try:
            limit = int(limit_raw)
        except ValueError:
            return jsonify({"error": "limit must be numeric"}), 400
        if limit < 0:
            return jsonify({"error": "limit must not be negative"}), 400

    records = get_store().get_history(limit)
    return jsonify({"data": [record.to_dict() for record in records]}), 200


@app.get("/history/<record_id>")
def get_history_record(record_id: str) -> Any:
    record = get_store().get_by_id(record_id)
    if record is None:
        return jsonify({"error": "record not found"}), 404
    return jsonify({"data": record.to_dict()}), 200


@app.post("/history/<record_id>/revalidate")
def revalidate(record_id: str) -> Any:
    store = get_store()
    record = store.get_by_id(record_id)
    if record is None:
        return jsonify({"error": "record not found"}), 404
    _, new_record = flows.revalidate_record(get_service(), store, record)
    return jsonify({"data": new_record.to_dict()}), 200


@app.delete("/history")
def clear_history() -> Any:
    cleared = get_store().clear()
    return jsonify({"data": {"cleared": cleared}}), 200


# ---------- Errors ----------


@app.errorhandler(CorruptHistoryError)
def handle_corrupt_history(exc: CorruptHistoryError) -> Any:
    logger.error("History store is corrupt: %s", exc)
    return jsonify({"error": str(exc)}), 500


@app.errorhandler(ValueError)
def handle_bad_input(exc: ValueError) -> Any:
    return jsonify({"error": str(exc)}), 400


@app.errorhandler(ConfigError)
def handle_config_error(exc: ConfigError) -> Any:
    logger.error("Configuration error: %s", exc)
    return jsonify({"error": str(exc)}), 503


def main() -> None:
    port = get_settings().port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
