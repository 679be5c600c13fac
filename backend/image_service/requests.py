"""
Request resolution for the segment image endpoint.

A request arrives either as JSON or as multipart form data. Both are resolved
once into an `ImageRequest`, then validated before anything touches the disk
or the image model.
"""

import json
import re
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from flask import Request
from werkzeug.exceptions import BadRequest

from backend.image_service.errors import (
    FieldTooLong,
    InvalidIndex,
    InvalidStyle,
    MalformedJSON,
    MissingConfiguration,
    MissingInput,
    UnsupportedContentType,
)

# --- CONSTANTS FOR VALIDATION ---
VALID_STYLES = ["cinematic", "anime", "flat lay", "realistic"]
STYLE_ALIASES = {"flat-lay": "flat lay"}
FIELD_MAX_LENGTH = 100
DATA_URI_PREFIX = "data:image"

JSON_SOURCE = "json"
MULTIPART_SOURCE = "multipart"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class StyleSettings:
    style: str
    character: str = ""
    scene: str = ""


@dataclass(frozen=True)
class ImagePayload:
    """An image supplied by the client: a base64 data URI or raw uploaded bytes."""
    data_uri: Optional[str] = None
    upload: Optional[bytes] = None


@dataclass(frozen=True)
class ImageRequest:
    source: str
    raw_index: Any = None
    prompt: Optional[str] = None
    raw_style_settings: Any = None
    image_description: Optional[str] = None
    image: Optional[ImagePayload] = None
    # Filled in by validate_request
    index: Optional[int] = None
    style_settings: Optional[StyleSettings] = None


def parse_request(request: Request) -> ImageRequest:
    """
    Resolve an incoming request into an ImageRequest based on its content type.

    Raises:
        UnsupportedContentType: If the body is neither JSON nor multipart.
        MalformedJSON: If the JSON body or the styleSettings field cannot be parsed.
    """
    mimetype = request.mimetype or ""

    if mimetype == "application/json":
        return _parse_json(request)
    if mimetype == "multipart/form-data":
        return _parse_multipart(request)

    raise UnsupportedContentType()


def _parse_json(request: Request) -> ImageRequest:
    try:
        body = request.get_json()
    except BadRequest:
        raise MalformedJSON()

    if not isinstance(body, dict):
        raise MalformedJSON()

    prompt = body.get("prompt") if isinstance(body.get("prompt"), str) else None

    style_settings = body.get("styleSettings")
    if not isinstance(style_settings, dict):
        style_settings = None

    image = None
    image_base64 = body.get("image_base64")
    if isinstance(image_base64, str) and image_base64.startswith(DATA_URI_PREFIX):
        image = ImagePayload(data_uri=image_base64)

    description = body.get("image_description")
    if not isinstance(description, str):
        description = None

    # height, width, seed and model_id are legacy fields and are ignored
    return ImageRequest(
        source=JSON_SOURCE,
        raw_index=body.get("segmentIdx"),
        prompt=prompt,
        raw_style_settings=style_settings,
        image_description=description,
        image=image,
    )


def _parse_multipart(request: Request) -> ImageRequest:
    form = request.form

    raw_style = form.get("styleSettings")
    style_settings = None
    if raw_style:
        try:
            style_settings = json.loads(raw_style)
        except ValueError:
            raise MalformedJSON("Invalid styleSettings JSON")

    image = None
    upload = request.files.get("file")
    if upload is not None and upload.filename:
        image = ImagePayload(upload=upload.read())

    image_base64 = form.get("image_base64")
    if isinstance(image_base64, str) and image_base64.startswith(DATA_URI_PREFIX):
        image = ImagePayload(data_uri=image_base64)

    return ImageRequest(
        source=MULTIPART_SOURCE,
        raw_index=form.get("index", "0"),
        prompt=form.get("prompt"),
        raw_style_settings=style_settings,
        image_description=form.get("image_description") or None,
        image=image,
    )


def parse_index(value: Any) -> int:
    """
    Parse a segment index the lenient way browsers do: the leading integer wins.

    Raises:
        InvalidIndex: If no leading integer can be read.
    """
    if value is None or isinstance(value, bool):
        raise InvalidIndex()

    match = _LEADING_INT.match(str(value))
    if not match:
        raise InvalidIndex()
    return int(match.group(1))


def parse_style_settings(raw: Any) -> Optional[StyleSettings]:
    """
    Validate style metadata.

    Returns:
        StyleSettings: The validated settings, or None if none were sent.

    Raises:
        InvalidStyle: If the style is not one of VALID_STYLES.
        FieldTooLong: If character or scene exceed FIELD_MAX_LENGTH characters.
    """
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise InvalidStyle("Invalid style settings")

    style = raw.get("style")
    if not isinstance(style, str):
        raise InvalidStyle(f"Invalid style: {style}")
    style = STYLE_ALIASES.get(style, style)
    if style not in VALID_STYLES:
        raise InvalidStyle(f"Invalid style: {raw.get('style')}")

    character = raw.get("character")
    scene = raw.get("scene")
    if character is None:
        character = ""
    if scene is None:
        scene = ""
    if not isinstance(character, str) or not isinstance(scene, str):
        raise InvalidStyle("Character and scene must be strings")

    if len(character) > FIELD_MAX_LENGTH or len(scene) > FIELD_MAX_LENGTH:
        raise FieldTooLong()

    return StyleSettings(style=style, character=character, scene=scene)


def validate_request(image_request: ImageRequest, api_key: Optional[str]) -> ImageRequest:
    """
    Run every check that must pass before any side effect.

    Returns:
        ImageRequest: A copy with `index` and `style_settings` filled in.
    """
    index = parse_index(image_request.raw_index)
    style_settings = parse_style_settings(image_request.raw_style_settings)

    if not api_key and image_request.image is None:
        raise MissingConfiguration()

    if image_request.image is None and not image_request.prompt:
        raise MissingInput()

    return replace(image_request, index=index, style_settings=style_settings)


def describe(image_request: ImageRequest) -> Dict[str, Any]:
    """Summary of a request for log lines (no image bytes)."""
    return {
        "source": image_request.source,
        "index": image_request.index,
        "has_image": image_request.image is not None,
        "has_prompt": bool(image_request.prompt),
        "style": image_request.style_settings.style if image_request.style_settings else None,
    }
