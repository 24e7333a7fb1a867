from flask import Blueprint, jsonify

from utils.connection import get_connection_cache

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health():
    cache = get_connection_cache()
    return jsonify(status="ok", database=cache.status(), connected=cache.is_connected()), 200
