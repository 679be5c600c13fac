"""
Application configuration.
Values come from the environment (and a local .env file during development).
"""

import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """
    Default configuration loaded into the gateway with `app.config.from_object`.
    """

    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")
    GEMINI_IMAGE_MODEL = os.getenv("GEMINI_IMAGE_MODEL", "gemini-2.0-flash-exp-image-generation")

    # Stored images live under <GENERATED_IMAGES_DIR>/<user_id>/ and are
    # served back at /generated-images/<user_id>/<filename>
    GENERATED_IMAGES_DIR = os.getenv(
        "GENERATED_IMAGES_DIR",
        os.path.join(os.getcwd(), "public", "generated-images"),
    )

    # Uploads are capped at 5 MB
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))

    CORS_ORIGINS = [
        origin.strip()
        for origin in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://localhost:5500,http://localhost:8080",
        ).split(",")
        if origin.strip()
    ]
