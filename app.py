import os
from flask import Flask, redirect
from config import Config
from extensions import init_extensions
from errors import register_error_handlers
from logger import configure_app_logging


def create_app(config_class=Config):
    app = Flask(__name__, static_folder="public", static_url_path="")
    app.config.from_object(config_class)

    configure_app_logging(app)

    # ------------------------------------------------------------------------------------------------------------------------
    # DATABASE URI Fix
    # ------------------------------------------------------------------------------------------------------------------------
    DATABASE_URI = app.config.get("SQLALCHEMY_DATABASE_URI")
    if DATABASE_URI.startswith("sqlite:///") and ":memory:" not in DATABASE_URI:
        os.makedirs(os.path.dirname(DATABASE_URI.replace("sqlite:///", "", 1)) or ".", exist_ok=True)

    # ------------------------------------------------------------------------------------------------------------------------
    # Initialize extensions
    # ------------------------------------------------------------------------------------------------------------------------
    init_extensions(app)
    import security  # noqa: F401  registers the bearer token loader

    register_error_handlers(app)
    register_blueprints(app)

    from bonus.config import CommissionConfig
    is_valid, message = CommissionConfig.validate_configuration()
    if is_valid:
        app.logger.info(message)
    else:
        app.logger.error(f"Commission configuration invalid: {message}")

    summary = CommissionConfig.get_distribution_summary()
    levels = ", ".join(
        f"L{level} {info['percentage_display']}" for level, info in summary["distribution"].items()
    )
    app.logger.info(f"Commission distribution on {summary['payment_amount']:g}: {levels}")

    # ----------------------
    # Basic routes
    # ----------------------
    @app.route("/")
    def home():
        return redirect("/login.html")

    @app.route("/healthz")
    def healthz():
        return {"status": "ok"}, 200

    return app


def register_blueprints(app):
    """Register all blueprints"""
    from blueprints.auth import bp as auth_bp
    from blueprints.profile import bp as profile_bp
    from blueprints.payments import bp as payment_bp
    from blueprints.withdraw import bp as withdraw_bp
    from blueprints.admin import admin_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(profile_bp)
    app.register_blueprint(payment_bp)
    app.register_blueprint(withdraw_bp)
    app.register_blueprint(admin_bp)


# ----------------------
# Create app instance
# ----------------------
app = create_app()

# ----------------------
# Local development
# ----------------------
if __name__ == "__main__":
    port = app.config.get("PORT", 3000)
    debug_mode = app.config.get("DEBUG", False)
    app.run(debug=debug_mode, host="0.0.0.0", port=port)
