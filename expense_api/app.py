# expense_api/app.py

import logging
import time
from datetime import datetime, timezone

from flask import Flask, g, jsonify, request
from flask_cors import CORS

from . import auth, expenses, reports
from .analytics import ReportEngine
from .config import Config, cors_origins
from .db import Database
from .errors import register_error_handlers
from .identity import IdentityProvider
from .store import ExpenseStore

# ---------------- Configuration ----------------
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("expense-api")


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


# ---------------- Flask App Factory ----------------
def create_app(overrides=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    logger.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    app.config["STARTED_AT"] = time.monotonic()

    # Components share one database handle
    database = Database(app.config["DB_PATH"])
    database.init_app(app)
    store = ExpenseStore(database)
    app.extensions["identity_provider"] = IdentityProvider(database)
    app.extensions["expense_store"] = store
    app.extensions["report_engine"] = ReportEngine(store)

    auth.init_jwt(app)

    # CORS
    CORS(app, resources={r"/*": {"origins": cors_origins(app.config["CORS_ORIGINS"])}}, supports_credentials=True)

    # Blueprints
    app.register_blueprint(auth.auth_bp, url_prefix="/api")
    app.register_blueprint(expenses.bp)
    app.register_blueprint(reports.bp)

    register_error_handlers(app)

    # Initialize DB
    with app.app_context():
        database.init_schema()
        logger.info(f"Database initialized at {database.path}")

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        started = g.get("request_started")
        elapsed_ms = (time.perf_counter() - started) * 1000 if started else 0.0
        logger.info(f"{request.method} {request.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

    @app.cli.command("init-db")
    def init_db_command():
        """Create tables and indexes."""
        database.init_schema()
        print(f"Database initialized at {database.path}")

    # ---------------- Core Endpoints ----------------
    @app.route("/")
    def root():
        return jsonify({
            "success": True,
            "message": "Expense Tracker API is running",
            "version": app.config["API_VERSION"],
            "timestamp": _now_iso(),
        })

    @app.route("/health")
    def health():
        return jsonify({
            "success": True,
            "status": "healthy",
            "database": "connected" if database.ping() else "disconnected",
            "uptime": round(time.monotonic() - app.config["STARTED_AT"], 3),
            "timestamp": _now_iso(),
        })

    return app


# ---------------- Run ----------------
def main():
    app = create_app()
    logger.info("=" * 50)
    logger.info(f"Server running in {app.config['APP_ENV']} mode")
    logger.info(f"Server listening on port {app.config['PORT']}")
    logger.info("=" * 50)
    app.run(host=app.config["HOST"], port=app.config["PORT"], debug=app.config["APP_ENV"] == "development")


if __name__ == "__main__":
    main()
