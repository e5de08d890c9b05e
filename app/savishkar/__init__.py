import logging
from datetime import timedelta

from flask import Flask, g, render_template, request, session
from dotenv import load_dotenv
from sqlalchemy import inspect as sa_inspect

from app.savishkar.config import load_config
from app.savishkar.db import init_db, teardown_db_session
from app.savishkar.routes import bp as routes_bp
from app.savishkar.auth import bp as auth_bp, load_current_user, password_change_guard
from app.savishkar.admin import bp as admin_bp
from app.savishkar.modules.applications.admin import bp as applications_bp
from app.savishkar.modules.members.admin import bp as members_bp
from app.savishkar.modules.districts.admin import bp as districts_bp
from app.savishkar.modules.announcements.admin import bp as announcements_bp
from app.savishkar.modules.events.admin import bp as events_bp
from app.savishkar.modules.leadership.admin import bp as leadership_bp
from app.savishkar.modules.programs.admin import bp as programs_bp

# Tables every request path depends on; checked once, on the first admin request.
REQUIRED_TABLES = (
    "users",
    "profiles",
    "audit_events",
    "applications",
    "prant_districts",
    "announcements",
    "event_delegates",
    "programs",
)

# Login is the only state-changing endpoint reachable before a session exists.
_CSRF_EXEMPT_ENDPOINTS = ("auth.login_post",)


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__, template_folder="templates", static_folder="static")
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=8)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True

    # CSRF protection (minimal)
    from app.savishkar.security import ensure_csrf_token, validate_csrf

    @app.context_processor
    def _inject_csrf() -> dict:
        return {"csrf_token": ensure_csrf_token()}

    @app.context_processor
    def _inject_capabilities() -> dict:
        from app.savishkar.rbac import user_can

        return {"can_do": user_can, "org_name": app.config.get("ORG_NAME")}

    @app.template_filter("dateformat")
    def _dateformat_filter(value, format: str = "%Y-%m-%d") -> str:
        if value is None:
            return "-"
        if hasattr(value, "strftime"):
            return value.strftime(format)
        return str(value)

    @app.before_request
    def _csrf_guard():
        if request.path.startswith(("/static/", "/health", "/healthz")):
            return None
        ensure_csrf_token()
        session.permanent = True
        if request.method in ("POST", "PUT", "PATCH", "DELETE"):
            if (request.endpoint or "") in _CSRF_EXEMPT_ENDPOINTS:
                return None
            if not validate_csrf(request):
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

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(applications_bp, url_prefix="/admin")
    app.register_blueprint(members_bp, url_prefix="/admin")
    app.register_blueprint(districts_bp, url_prefix="/admin")
    app.register_blueprint(announcements_bp, url_prefix="/admin")
    app.register_blueprint(events_bp, url_prefix="/admin")
    app.register_blueprint(leadership_bp, url_prefix="/admin")
    app.register_blueprint(programs_bp, url_prefix="/admin")

    def _load_user_wrapper():
        if request.path.startswith(("/static/", "/health", "/healthz")):
            g.current_user = None
            return None
        return load_current_user()

    app.before_request(_load_user_wrapper)
    app.before_request(password_change_guard)
    app.teardown_appcontext(teardown_db_session)

    # Migration health (lean): detect drift between code expectations and DB schema.
    # Runs lazily so tests and `alembic upgrade` can create tables after create_app().
    app.config.setdefault("_schema_health_checked", False)
    app.config.setdefault("_schema_health_ok", True)
    app.config.setdefault("_schema_health_missing", [])

    def _run_schema_health_check() -> None:
        missing: list[str] = []
        try:
            engine = app.extensions.get("sqlalchemy_engine")
            if engine is None:
                raise RuntimeError("sqlalchemy_engine not initialized")
            insp = sa_inspect(engine)
            for table in REQUIRED_TABLES:
                if not insp.has_table(table):
                    missing.append(f"{table} (table)")
            if insp.has_table("profiles"):
                cols = {c["name"] for c in insp.get_columns("profiles")}
                for col in ("region", "membership_id", "event_manager_expiry", "is_leadership"):
                    if col not in cols:
                        missing.append(f"profiles.{col}")
        except Exception as e:
            app.logger.exception("Schema health check failed: %s", e)

        app.config["_schema_health_checked"] = True
        app.config["_schema_health_missing"] = missing
        app.config["_schema_health_ok"] = not missing
        if missing:
            app.logger.error("DB schema out of date; run `alembic upgrade head`. Missing: %s", ", ".join(missing))

    @app.before_request
    def _schema_health_guardrail():  # type: ignore[no-redef]
        if not request.path.startswith("/admin") or not getattr(g, "current_user", None):
            return None
        if not app.config.get("_schema_health_checked"):
            _run_schema_health_check()
        if app.config.get("_schema_health_ok"):
            return None
        return render_template("errors/schema_out_of_date.html", missing=app.config.get("_schema_health_missing") or []), 500

    @app.errorhandler(500)
    def _err_500(e):  # type: ignore[no-redef]
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        return render_template("errors/500.html"), 500

    @app.errorhandler(403)
    def _err_403(e):  # type: ignore[no-redef]
        missing = getattr(g, "missing_capability", None)
        if missing:
            app.logger.warning("Forbidden: missing_capability=%s request_id=%s", missing, getattr(g, "request_id", None))
        return render_template("errors/403.html", missing_capability=missing), 403

    @app.errorhandler(404)
    def _err_404(e):  # type: ignore[no-redef]
        return render_template("errors/404.html"), 404

    @app.errorhandler(413)
    def _err_413(e):  # type: ignore[no-redef]
        return render_template("errors/400.html", message="Request too large."), 413

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
