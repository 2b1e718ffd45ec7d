import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from config import Config
from models import db
from utils.auth_utils import hash_password
from utils.errors import CatalogError
from utils.middleware import attach_request_id, echo_request_id
from utils.responses import fail
from utils.timeutils import iso, utc_now

# Import Blueprints
from auth.routes import auth_bp
from catalog.routes import lookup_bp, data_bp, catalog_bp, versions_bp
from change_requests.routes import change_requests_bp

logging.basicConfig(level=logging.INFO)

def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Stored as hashes so login compares through werkzeug like any stored password
    app.config["ADMIN_PASSWORD_HASH"] = hash_password(app.config["ADMIN_PASSWORD"])
    app.config["REP_PASSWORD_HASH"] = hash_password(app.config["REP_PASSWORD"])

    # Initialize Extensions
    CORS(app, resources={r"/*": {
        "origins": app.config["CORS_ORIGINS"],
        "allow_headers": ["Content-Type", "Authorization", "X-API-Key", "X-Request-ID"],
        "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    }})
    db.init_app(app)

    app.before_request(attach_request_id)
    app.after_request(echo_request_id)

    # Register Blueprints
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(lookup_bp, url_prefix="/api")
    app.register_blueprint(data_bp, url_prefix="/api/data")
    app.register_blueprint(catalog_bp, url_prefix="/api/catalog")
    app.register_blueprint(versions_bp, url_prefix="/api/versions")
    app.register_blueprint(change_requests_bp, url_prefix="/api/change-requests")

    register_error_handlers(app)

    @app.route("/health")
    def health():
        write_enabled = bool(app.config.get("ENABLE_WRITE_OPERATIONS"))
        return jsonify({
            "status": "ok",
            "timestamp": iso(utc_now()),
            "mode": "read-write" if write_enabled else "read-only",
            "write_operations_enabled": write_enabled,
            "api_key_required": bool(app.config.get("API_KEY")),
        })

    @app.route("/")
    def home():
        return {
          "endpoints": {
            "lookup": {
              "lookup": "GET /api/lookup/<service>/<network>",
              "services": "GET /api/services?network=<optional>",
              "compare": "GET /api/compare/<service>"
            },
            "data": {
              "get_all": "GET /api/data",
              "create": "POST /api/data",
              "update": "PUT /api/data/<service>",
              "delete": "DELETE /api/data/<service>"
            },
            "auth": {
              "login": "POST /api/auth/login",
              "session": "GET /api/auth/session"
            },
            "catalog": {
              "list": "GET /api/catalog",
              "add": "POST /api/catalog",
              "update": "PATCH /api/catalog/<service_id>",
              "edit_field": "PUT /api/catalog/<service_id>/fields",
              "delete": "DELETE /api/catalog/<service_id>",
              "export": "GET /api/catalog/export",
              "import": "POST /api/catalog/import"
            },
            "change_requests": {
              "list": "GET /api/change-requests",
              "create": "POST /api/change-requests",
              "submit": "POST /api/change-requests/<id>/submit",
              "recall": "POST /api/change-requests/<id>/recall",
              "approve": "POST /api/change-requests/<id>/approve",
              "reject": "POST /api/change-requests/<id>/reject",
              "cancel": "DELETE /api/change-requests/<id>"
            },
            "versions": {
              "list": "GET /api/versions",
              "save": "POST /api/versions",
              "restore": "POST /api/versions/<id>/restore"
            },
            "health": "GET /health"
          },
          "message": "USSD Data Manager API",
          "version": "1.0.0"
        }

    with app.app_context():
        db.create_all()
        if app.config.get("SEED_SAMPLE_DATA"):
            from seed_catalog import seed_sample_catalog
            seeded = seed_sample_catalog()
            if seeded:
                app.logger.info("Seeded %s sample services", seeded)

    return app

def register_error_handlers(app):
    @app.errorhandler(CatalogError)
    def handle_catalog_error(e):
        # Nothing half-applied survives a rejected operation
        db.session.rollback()
        app.logger.info("%s: %s", type(e).__name__, e.message)
        return fail(e.message, e.status_code, **e.extra)

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return fail(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        db.session.rollback()
        app.logger.exception("Unhandled error")
        return fail("Internal server error", 500)

if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, port=3001)
