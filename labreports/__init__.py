from flask import Flask, jsonify, request
from .extensions import db, migrate, jwt
from .errors import ReportEngineError
import click
import logging
import os

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Create Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    from labreports.config import config, get_config
    config_class = config.get(config_name, config['default']) if config_name else get_config()
    app.config.from_object(config_class)
    config_class.init_app(app)

    logging.getLogger('labreports').setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Initialize extensions first (before error handlers)
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    # Initialize CORS
    from labreports.utils.cors import init_cors
    init_cors(app)

    @app.errorhandler(ReportEngineError)
    def handle_report_error(error):
        return jsonify(error.to_dict()), error.status_code

    # Global error handler
    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal Server Error: {error}", exc_info=True)
        return jsonify({
            'success': False,
            'error': 'Internal server error. Check server logs for details.'
        }), 500

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'success': False,
            'error': 'Endpoint not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'success': False,
            'error': 'Method not allowed'
        }), 405

    # Setup logging
    if not app.debug and not app.testing:
        from logging.handlers import RotatingFileHandler

        log_file = app.config['LOG_FILE']
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10240000,
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger('labreports').addHandler(file_handler)
        app.logger.setLevel(logging.INFO)
        app.logger.info('Application startup')

    # Security headers middleware
    @app.after_request
    def set_security_headers(response):
        """Add security headers to all responses"""
        if not app.debug:
            response.headers['X-Content-Type-Options'] = 'nosniff'
            response.headers['X-Frame-Options'] = 'DENY'
            response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
            # Only add HSTS if using HTTPS
            if request.is_secure:
                response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    # Token errors answer in the same JSON shape as the rest of the API
    @jwt.unauthorized_loader
    def unauthorized(reason):
        return jsonify({
            'success': False,
            'error': 'Authentication required'
        }), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({
            'success': False,
            'error': 'Invalid token'
        }), 401

    # Import models to register them with SQLAlchemy
    with app.app_context():
        from .models import TestAssignment, ReportType, ReportField, ReportInstance, ReportValue  # noqa: F401

        # Register blueprints
        from .routes import health_bp, reports_bp
        app.register_blueprint(health_bp)  # Register health check first
        app.register_blueprint(reports_bp)

        if app.config.get('SEED_REPORT_TYPES'):
            from .seeds import seed_report_types_on_startup
            seed_report_types_on_startup()

    register_cli(app)

    return app


def register_cli(app: Flask) -> None:
    """
    Adds small helper CLI commands:
    - flask create-db: create tables using the configured database
    - flask seed-report-types: add the default report types if missing
    """

    @app.cli.command("create-db")
    def create_db_command():
        """Create database tables if they do not exist."""
        db.create_all()
        click.echo("Database tables created.")

    @app.cli.command("seed-report-types")
    def seed_report_types_command():
        """Seed the BLOOD_GROUP and CBC report types."""
        from .seeds import seed_report_types
        added = seed_report_types()
        click.echo(f"Seeded {added} report type(s).")
