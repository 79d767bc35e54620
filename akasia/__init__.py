from flask import Flask, jsonify
from flask_cors import CORS

from akasia.config.config import Config
from akasia.config.env import init_env
from akasia.extensions import db, jwt, s3, whatsapp
from akasia.controllers.auth_controller import auth_bp
from akasia.controllers.user_controller import user_bp
from akasia.controllers.car_controller import car_bp
from akasia.controllers.usage_controller import usage_bp
from akasia.controllers.finance_controller import finance_bp
from akasia.controllers.fuel_controller import fuel_bp
from akasia.controllers.tax_controller import tax_bp
from akasia.controllers.spending_controller import spending_bp
from akasia.controllers.wallet_controller import wallet_bp
from akasia.controllers.pengajuan_controller import pengajuan_bp
from akasia.controllers.perizinan_controller import perizinan_bp
from akasia.controllers.public_perizinan_controller import public_perizinan_bp
from akasia.controllers.upload_controller import upload_bp
from akasia.controllers.export_controller import export_bp
from akasia.controllers.admin_tools_controller import admin_tools_bp
from akasia.controllers.dashboard_controller import dashboard_bp
from akasia.seed import seed_database


def _unauthorized(*_args):
    return jsonify({'error': 'Unauthorized'}), 401


def create_app(config_class=None):
    if config_class is None:
        # Initialize environment variables
        init_env()
        config_class = Config

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions AFTER app creation
    db.init_app(app)
    jwt.init_app(app)
    s3.init_app(app)
    whatsapp.init_app(app)

    jwt.unauthorized_loader(_unauthorized)
    jwt.invalid_token_loader(_unauthorized)
    jwt.expired_token_loader(_unauthorized)
    jwt.revoked_token_loader(_unauthorized)

    CORS(app, resources={
        r"/*": {
            "origins": "*",
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-CSRF-TOKEN"],
            "expose_headers": ["Content-Disposition", "Content-Type"],
            "supports_credentials": True
        }
    })

    # Register Blueprints (Routes)
    app.register_blueprint(auth_bp)
    app.register_blueprint(user_bp)
    app.register_blueprint(car_bp)
    app.register_blueprint(usage_bp)
    app.register_blueprint(finance_bp)
    app.register_blueprint(fuel_bp)
    app.register_blueprint(tax_bp)
    app.register_blueprint(spending_bp)
    app.register_blueprint(wallet_bp)
    app.register_blueprint(pengajuan_bp)
    app.register_blueprint(perizinan_bp)
    app.register_blueprint(public_perizinan_bp)
    app.register_blueprint(upload_bp)
    app.register_blueprint(export_bp)
    app.register_blueprint(admin_tools_bp)
    app.register_blueprint(dashboard_bp)

    @app.route('/')
    def welcome():
        return jsonify({'message': 'Welcome to the Akasia API'})

    @app.cli.command('seed')
    def seed_command():
        """Create tables, default users, sample cars and the global wallet."""
        db.create_all()
        seed_database()

    return app
