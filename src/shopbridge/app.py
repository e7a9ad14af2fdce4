import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from shopbridge.core.config import Config
from shopbridge.core.dependencies import DependencyContainer, build_container
from shopbridge.core.exceptions import BaseAPIException, StoreError
from shopbridge.repositories.cart_repository import CartRepository
from shopbridge.routes import carts_bp, chatwoot_bp, clients_bp, products_bp
from shopbridge.routes.utils import CONTAINER_KEY

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def create_app(config: Optional[Config] = None, container: Optional[DependencyContainer] = None) -> Flask:
    """
    Application factory.

    Both arguments are optional: config defaults to the environment and the
    container is wired from config. Tests pass their own container.
    """
    config = config or Config.from_env()
    config.validate()
    configure_logging(config.app.log_level)

    app = Flask(__name__)
    app.config["DEBUG"] = config.app.debug
    app.json.ensure_ascii = False
    app.extensions[CONTAINER_KEY] = container or build_container(config)

    # ------------------------------------------------------------------ #
    # Blueprints, each domain registered under /api/                      #
    # ------------------------------------------------------------------ #
    app.register_blueprint(products_bp, url_prefix="/api/products")
    app.register_blueprint(carts_bp,    url_prefix="/api/carts")
    app.register_blueprint(clients_bp,  url_prefix="/api/clients")
    app.register_blueprint(chatwoot_bp, url_prefix="/api/chatwoot")

    # ------------------------------------------------------------------ #
    # Error handlers: {"error": message} everywhere                       #
    # ------------------------------------------------------------------ #
    @app.errorhandler(BaseAPIException)
    def api_error(e: BaseAPIException):
        if e.status_code >= 500:
            logger.error(f"{type(e).__name__}: {e.internal_message}")
        else:
            logger.warning(f"{type(e).__name__}: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Ruta no encontrada"}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Método no permitido"}), 405

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return jsonify({"error": str(e.description)}), e.code

    @app.errorhandler(500)
    def internal_error(e):
        original = getattr(e, "original_exception", None)
        logger.error("Unhandled error", exc_info=original)
        return jsonify({"error": "Error interno del servidor"}), 500

    # ------------------------------------------------------------------ #
    # Health check                                                         #
    # ------------------------------------------------------------------ #
    @app.get("/health")
    def health():
        """Liveness + readiness probe. Returns 503 if the store is unreachable."""
        try:
            app.extensions[CONTAINER_KEY].get(CartRepository).ping()
            return jsonify({
                "status": "ok",
                "database": "reachable",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }), 200
        except StoreError as exc:
            return jsonify({"status": "error", "database": exc.message}), 503

    return app
