"""Application factory and initialization"""
import logging
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException
from config import config

db = SQLAlchemy()
migrate = Migrate()

logger = logging.getLogger(__name__)

def create_app(config_name='default'):
    """Create and configure the Flask application"""
    app = Flask(__name__)
    app.config.from_object(config[config_name])

    configure_logging(app)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Register blueprints
    from lendledger.main import main_bp
    from lendledger.borrowers import borrowers_bp
    from lendledger.loans import loans_bp
    from lendledger.payments import payments_bp
    from lendledger.reports import reports_bp

    app.register_blueprint(main_bp, url_prefix='/api/dashboard')
    app.register_blueprint(borrowers_bp, url_prefix='/api/borrowers')
    app.register_blueprint(loans_bp, url_prefix='/api/loans')
    app.register_blueprint(payments_bp, url_prefix='/api/payments')
    app.register_blueprint(reports_bp, url_prefix='/api/reports')

    register_error_handlers(app)

    return app

def configure_logging(app):
    """Route package loggers through the app's configured level"""
    level = app.config.get('LOG_LEVEL', 'INFO')
    if not app.testing and not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format='%(asctime)s %(levelname)s [%(name)s] %(message)s'
        )
    logging.getLogger('lendledger').setLevel(level)
    app.logger.setLevel(level)

def register_error_handlers(app):
    """Answer every error with a JSON body"""

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'message': error.description}), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        logger.exception('Database error: %s', error)
        return jsonify({'message': 'A database error occurred'}), 500
