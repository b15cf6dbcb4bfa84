import logging
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, g, render_template, request, session
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from app.cms.config import load_config
from app.cms.db import init_db, teardown_db_session
from app.cms.errors import register_error_handlers
from app.cms.routes import bp as routes_bp
from app.cms.auth import bp as auth_bp, load_current_user
from app.cms.admin import bp as admin_bp
from app.cms.modules.specialties.admin import bp as specialties_bp
from app.cms.modules.destinations.admin import bp as destinations_bp
from app.cms.modules.treatments.admin import bp as treatments_bp
from app.cms.modules.hospitals.admin import bp as hospitals_bp
from app.cms.modules.doctors.admin import bp as doctors_bp
from app.cms.modules.blog.admin import bp as blog_bp
from app.cms.modules.testimonials.admin import bp as testimonials_bp
from app.cms.modules.videos.admin import bp as videos_bp
from app.cms.modules.costs.admin import bp as costs_bp
from app.cms.modules.pages.admin import bp as pages_bp
from app.cms.modules.submissions.admin import bp as submissions_bp
from app.cms.modules.media.admin import bp as media_bp

_SKIP_PREFIXES = ("/static/", "/health", "/healthz", "/uploads/")


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(days=int(app.config.get("JWT_EXPIRES_DAYS") or 7))

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL") or "INFO",
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # CSRF protection (double-submit: session token echoed in X-CSRF-Token)
    from app.cms.security import ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_permissions() -> dict:
        from app.cms.content import REGISTRY
        from app.cms.constants import ROLE_LABELS
        from app.cms.rbac import user_has_permission
        from flask import g as _g

        def has_perm(key: str) -> bool:
            return user_has_permission(getattr(_g, "current_user", None), key)

        nav: dict[str, list] = {}
        for ct in REGISTRY.values():
            if ct.list_url and has_perm(ct.view_permission):
                nav.setdefault(ct.nav_group, []).append(ct)

        return {"has_perm": has_perm, "nav": nav, "role_labels": ROLE_LABELS}

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%Y-%m-%d") -> str:
        if value is None:
            return "—"
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(_SKIP_PREFIXES):
            return None
        ensure_csrf_token()
        session.permanent = True
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if not app.config.get("CSRF_ENABLED", True):
                return None
            # Login and the public website forms carry no session token
            if (request.endpoint or "").startswith("auth.") or request.path.startswith("/api/public/"):
                return None
            if not validate_csrf(request):
                if request.path.startswith("/api/"):
                    return {"error": "CSRF token missing or invalid"}, 403
                return render_template("errors/400.html", message="CSRF token missing or invalid."), 400

    # Production guardrails (fail fast with clear logs)
    env = (app.config.get("ENV") or "").strip().lower()
    if env in ("prod", "production"):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")
        if str(app.config.get("ADMIN_PASSWORD")) == "change-me":
            app.logger.warning("ADMIN_PASSWORD is not set; the seeded admin uses the default password.")

    init_db(app)

    def _dispose_engine_on_fork() -> None:
        import os
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    # Storage health check (fail loudly on misconfiguration)
    if app.config.get("STORAGE_BACKEND") == "s3":
        missing_s3 = []
        for key in ("S3_ENDPOINT", "S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY"):
            if not app.config.get(key):
                missing_s3.append(key)
        if missing_s3:
            app.logger.error("STORAGE CONFIG ERROR: Missing required S3 env vars: %s", ", ".join(missing_s3))
        else:
            from botocore.exceptions import BotoCoreError, ClientError
            from app.cms.storage import storage_from_config, S3Storage

            storage = storage_from_config(app.config)
            if isinstance(storage, S3Storage):
                try:
                    storage._client().head_bucket(Bucket=storage.bucket)
                    app.logger.info("Storage health check PASSED: S3 bucket '%s' accessible", storage.bucket)
                except (BotoCoreError, ClientError) as e:
                    app.logger.error("STORAGE CONFIG ERROR: Cannot access S3 bucket: %s", e)

    # API rate limit (per client IP); pages and static files are not limited
    limiter = Limiter(
        get_remote_address,
        app=app,
        default_limits=[app.config["API_RATE_LIMIT"]],
        storage_uri="memory://",
    )

    @limiter.request_filter
    def _only_api() -> bool:
        return not request.path.startswith("/api/")

    # The public website lives on another origin
    CORS(app, resources={r"/api/public/*": {"origins": "*"}})

    register_error_handlers(app)

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(specialties_bp)
    app.register_blueprint(destinations_bp)
    app.register_blueprint(treatments_bp)
    app.register_blueprint(hospitals_bp)
    app.register_blueprint(doctors_bp)
    app.register_blueprint(blog_bp)
    app.register_blueprint(testimonials_bp)
    app.register_blueprint(videos_bp)
    app.register_blueprint(costs_bp)
    app.register_blueprint(pages_bp)
    app.register_blueprint(submissions_bp)
    app.register_blueprint(media_bp)

    def _load_user_wrapper():
        if request.path.startswith(_SKIP_PREFIXES):
            g.current_user = None
            return None
        return load_current_user()

    app.before_request(_load_user_wrapper)
    app.teardown_appcontext(teardown_db_session)

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
