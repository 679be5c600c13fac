"""
API gateway: wires the image service blueprint and its dependencies.
This is the local entrypoint for development.
"""

from flask import Flask, jsonify, send_from_directory
from flask_cors import CORS
import os
import logging
import sys
from typing import Any, Dict, Optional
from dotenv import load_dotenv

load_dotenv()

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

# Add the project root to Python path
# This allows imports like 'from backend.image_service.routes import images_bp'
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))


def create_app(
    config_overrides: Optional[Dict[str, Any]] = None,
    user_store=None,
    image_generator=None,
) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        config_overrides (dict, optional): Values applied on top of backend.config.Config.
        user_store: Object with `get_user(user_id)`. Defaults to the Postgres UserStore.
        image_generator: Object with `generate(prompt)`. Defaults to a Gemini
            generator built from GEMINI_API_KEY on first use.

    Returns:
        Flask: The configured Flask application.
    """
    from backend.config import Config
    from backend.database.user_store import UserStore

    app = Flask(__name__)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.config["USER_STORE"] = user_store or UserStore()
    app.config["IMAGE_GENERATOR"] = image_generator

    CORS(app, resources={
        r"/*": {
            "origins": app.config["CORS_ORIGINS"],
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "expose_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True
        }
    })

    # --- REGISTER BLUEPRINTS ---
    try:
        from backend.image_service.routes import images_bp

        app.register_blueprint(images_bp, url_prefix="/api")

        logging.info("All blueprints registered successfully.")

    except ImportError as e:
        logging.error(f"Failed to import blueprints. Module not found: {e}")
        sys.exit(1)

    # --- GENERATED IMAGES ---
    @app.route("/generated-images/<user_id>/<filename>")
    def generated_image(user_id: str, filename: str):
        """
        Serve a stored segment image.
        """
        return send_from_directory(app.config["GENERATED_IMAGES_DIR"], f"{user_id}/{filename}")

    @app.errorhandler(413)
    def too_large(error):
        return jsonify({"success": False, "error": "Uploaded file is too large"}), 413

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return jsonify({"status": "gateway_ok"}), 200

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.getenv("GATEWAY_PORT", 5050))
    app.run(host="0.0.0.0", port=port, debug=True)
