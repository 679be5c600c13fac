"""
Builders shared by the test modules: sample images, fake Gemini stream
chunks and in-memory stand-ins for the injected dependencies.
"""

import base64
from io import BytesIO
from types import SimpleNamespace

from PIL import Image

from backend.image_service.generator import GeneratedImage


# --- IMAGE HELPERS ---
def make_image_bytes(size=(64, 32), fmt="PNG", color=(10, 120, 200)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_data_uri(size=(64, 32), fmt="PNG", subtype="png") -> str:
    encoded = base64.b64encode(make_image_bytes(size, fmt)).decode()
    return f"data:image/{subtype};base64,{encoded}"


# --- GEMINI STREAM HELPERS ---
def image_chunk(data: bytes, mime_type: str = "image/png"):
    part = SimpleNamespace(inline_data=SimpleNamespace(mime_type=mime_type, data=data), text=None)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def text_chunk(text: str):
    part = SimpleNamespace(inline_data=None, text=text)
    return SimpleNamespace(candidates=[SimpleNamespace(content=SimpleNamespace(parts=[part]))])


def empty_chunk():
    return SimpleNamespace(candidates=None)


# --- FAKES ---
class FakeUserStore:
    def __init__(self, users=None):
        self.users = users or {}

    def get_user(self, user_id):
        return self.users.get(str(user_id))


class FakeGenerator:
    """Records prompts and returns a fixed image, or raises `error` if set."""

    def __init__(self, data=None, mime_type="image/png", error=None):
        self.data = data if data is not None else make_image_bytes((1024, 768))
        self.mime_type = mime_type
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return GeneratedImage(data=self.data, mime_type=self.mime_type)
