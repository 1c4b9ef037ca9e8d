# app.py
from __future__ import annotations

import os
from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix
from flask_cors import CORS

from config import config_from_env
from db import db, migrate
from services.errors import FleetError

# Ensure models are imported so Flask-Migrate sees them
from models.user import User
from models.route import Route
from models.point import Point
from models.route_point import RoutePoint

# Blueprints
from routes.auth import auth_bp
from routes.bus_routes import routes_bp
from routes.points import points_bp
from routes.public import public_bp


def create_app(config_object=None) -> Flask:
    app = Flask(__name__)

    # Respect reverse proxy headers (scheme / host) for correct URL generation
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)  # type: ignore[arg-type]

    # CORS (open for now; tighten origins for production)
    CORS(app, resources={r"/*": {"origins": "*"}})

    # Load config + init extensions
    app.config.from_object(config_object or config_from_env())
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))
    db.init_app(app)
    migrate.init_app(app, db)

    with app.app_context():
        # Touch models so Alembic/Flask-Migrate registers them
        _ = (User, Route, Point, RoutePoint)

    @app.route("/")
    def index():
        return jsonify(
            success=True,
            message=app.config["APP_NAME"],
            version=app.config["APP_VERSION"],
            endpoints={
                "auth": "/auth",
                "routes": "/routes",
                "points": "/points",
                "public": "/public",
                "health": "/public/health",
            },
        ), 200

    @app.errorhandler(FleetError)
    def handle_fleet_error(e: FleetError):
        app.logger.info("[api] %s %s -> %s: %s", request.method, request.path, e.kind, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def handle_404(e):
        return jsonify(success=False, message="Endpoint not found", path=request.path), 404

    # Global error handler
    @app.errorhandler(Exception)
    def handle_any_error(e: Exception):
        if isinstance(e, HTTPException):
            return jsonify(success=False, message=e.description), e.code
        db.session.rollback()
        app.logger.exception("[api] unhandled error on %s %s", request.method, request.path)
        return jsonify(success=False, message="Internal server error"), 500

    # --- Debug: list routes ---
    @app.route("/__routes")
    def __routes():
        lines = []
        for rule in app.url_map.iter_rules():
            methods = ",".join(sorted(m for m in rule.methods if m not in {"HEAD", "OPTIONS"}))
            lines.append(f"{methods:10s} {rule.rule}")
        lines.sort()
        return Response("\n".join(lines), mimetype="text/plain")

    # Register blueprints
    app.register_blueprint(auth_bp)
    app.register_blueprint(routes_bp)
    app.register_blueprint(points_bp)
    app.register_blueprint(public_bp)

    # CLI: create tables and load demo data
    @app.cli.command("seed-demo")
    def seed_demo_cmd():
        from seed import seed_demo

        db.create_all()
        seed_demo()

    return app


# Optional local entrypoint (useful for quick dev runs)
if __name__ == "__main__":
    app = create_app()
    app.run(
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "5000")),
        debug=bool(os.environ.get("FLASK_DEBUG", "")),
    )
