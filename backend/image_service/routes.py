"""
Image service route handlers.

Provides the segment image endpoint:
- POST /generate-images with either an image (upload or base64 data URI)
  or a text prompt plus optional style settings.

Uploaded images are normalized to 512x512 PNG. Prompts are sent to Gemini and
the returned image is stored as-is. Either way the file lands in the user's
directory and its public URL is returned.
"""

import logging
from typing import Tuple

from flask import Blueprint, Response, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from backend.auth_service.utils import verify_token
from backend.image_service.errors import (
    ImageServiceError,
    MethodNotAllowed,
    Unauthorized,
    UpstreamGenerationFailure,
)
from backend.image_service.generator import DEFAULT_MODEL, GeminiImageGenerator, GenerationFailed
from backend.image_service.prompts import compose_prompt
from backend.image_service.requests import describe, parse_request, validate_request
from backend.image_service.storage import ImageStore, decode_data_uri, normalize_image

images_bp = Blueprint("images", __name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


# --- REQUEST LOGGING ---
@images_bp.before_request
def before_request() -> None:
    logging.info(f"[Images] Incoming {request.method} {request.path} ({request.content_type})")


@images_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Images] Response {response.status}")
    return response


@images_bp.errorhandler(ImageServiceError)
def handle_image_error(error: ImageServiceError) -> Tuple[Response, int]:
    """
    Render any ImageServiceError as a JSON error body with its status code.
    """
    response = jsonify({"success": False, "error": error.message})
    if isinstance(error, MethodNotAllowed):
        response.headers["Allow"] = "POST"
    return response, error.status_code


# --- DEPENDENCIES ---
def _get_generator() -> GeminiImageGenerator:
    """
    Return the injected generator, building one from GEMINI_API_KEY on first use.
    """
    generator = current_app.config.get("IMAGE_GENERATOR")
    if generator is None:
        generator = GeminiImageGenerator.from_api_key(
            current_app.config["GEMINI_API_KEY"],
            model=current_app.config.get("GEMINI_IMAGE_MODEL") or DEFAULT_MODEL,
        )
        current_app.config["IMAGE_GENERATOR"] = generator
    return generator


def _get_store() -> ImageStore:
    return ImageStore(current_app.config["GENERATED_IMAGES_DIR"])


def _success(stored) -> Tuple[Response, int]:
    return jsonify({
        "success": True,
        "imageUrl": stored.url,
        "direct_image_url": stored.url,
        "image_path": stored.path,
        "index": stored.index,
    }), 200


# --- GENERATE / UPLOAD ---
@images_bp.route("/generate-images", methods=ALL_METHODS)
def generate_images() -> Tuple[Response, int]:
    """
    Store an image for one video segment.

    Expects either:
    - application/json: prompt, segmentIdx, styleSettings, image_base64, image_description
    - multipart/form-data: index, prompt, styleSettings (JSON string),
      image_description, image_base64, file

    Returns:
        200: JSON with imageUrl, direct_image_url, image_path and index.
        400: Unsupported content type or invalid fields.
        401: Missing or invalid credentials.
        405: Method other than POST.
        500: Missing configuration, generation or storage failure.
    """
    if request.method != "POST":
        raise MethodNotAllowed(f"Method {request.method} Not Allowed")

    # Require authentication before looking at the body
    user = verify_token(request, current_app.config["USER_STORE"])
    if not user:
        raise Unauthorized()

    try:
        image_request = parse_request(request)
        image_request = validate_request(image_request, current_app.config.get("GEMINI_API_KEY"))
        logging.info(f"[Images] User {user.user_id} request {describe(image_request)}")

        store = _get_store()

        # --- Image supplied: normalize and store ---
        if image_request.image is not None:
            payload = image_request.image
            raw = decode_data_uri(payload.data_uri) if payload.data_uri else payload.upload
            stored = store.save(user.user_id, image_request.index, normalize_image(raw))
            return _success(stored)

        # --- Prompt supplied: generate with Gemini ---
        full_prompt = compose_prompt(
            image_request.prompt,
            image_request.image_description,
            image_request.style_settings,
        )
        logging.info(f"[Images] Generating image with prompt: {full_prompt}")

        try:
            generated = _get_generator().generate(full_prompt)
        except GenerationFailed as e:
            raise UpstreamGenerationFailure(str(e))

        if generated.mime_type != "image/png":
            logging.warning(f"[Images] Model returned {generated.mime_type}, storing as .png")

        stored = store.save(user.user_id, image_request.index, generated.data)
        return _success(stored)

    except (ImageServiceError, HTTPException):
        raise
    except Exception as e:
        logging.error(f"[Images] Error processing image: {e}")
        return jsonify({"success": False, "error": "Failed to process image"}), 500
