"""idlease HTTP server (Flask).

Exposes the allocator over two routes:
    GET /next            -> acquire a fresh id
    GET /heartbeat/<id>  -> renew a held id
"""
import logging

from flask import Flask, jsonify
from flask_cors import CORS

from .errors import LeaseError, NotLeased, OutOfRange, PoolExhausted

logger = logging.getLogger(__name__)

MALFORMED_ID_CODE = 4

# All lease errors are the caller's problem, not a server fault.
ERROR_STATUS = {
    PoolExhausted: 409,
    NotLeased: 410,
    OutOfRange: 404,
}


def _lease_error_response(e: LeaseError):
    return jsonify(e.to_dict()), ERROR_STATUS.get(type(e), 400)


def _internal_error_response():
    return jsonify({"error": {"code": 0, "msg": "Internal error!"}}), 500


def _parse_id(raw: str) -> int | None:
    digits = raw[1:] if raw[:1] in ("-", "+") else raw
    if not digits.isascii() or not digits.isdigit():
        return None
    try:
        return int(raw)
    except ValueError:
        # Past the interpreter's integer string length limit.
        return None


def create_app(allocator) -> Flask:
    """Build the Flask app serving the given allocator."""
    app = Flask(__name__)
    CORS(app)

    @app.route("/next", methods=["GET"])
    def next_id():
        """Lease a new id."""
        try:
            grant = allocator.acquire()
        except LeaseError as e:
            return _lease_error_response(e)
        except Exception:
            logger.exception("Unexpected failure in /next")
            return _internal_error_response()
        return jsonify({"id": grant.id, "exp": grant.expires_at}), 200

    @app.route("/heartbeat/<raw_id>", methods=["GET"])
    def heartbeat(raw_id):
        """Renew the lease on an id the caller already holds."""
        lease_id = _parse_id(raw_id)
        if lease_id is None:
            return jsonify({"error": {"code": MALFORMED_ID_CODE, "msg": "Malformed id!"}}), 400
        try:
            grant = allocator.renew(lease_id)
        except LeaseError as e:
            return _lease_error_response(e)
        except Exception:
            logger.exception("Unexpected failure in /heartbeat/%s", raw_id)
            return _internal_error_response()
        return jsonify({"id": grant.id, "exp": grant.expires_at}), 200

    return app
