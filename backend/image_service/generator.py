"""
Gemini image generation with a fixed retry budget.

The generator streams a response for the composed prompt and returns the first
inline image it sees. Empty streams and API errors are both retried, waiting
1s, 2s, ... between attempts; once the budget is spent a GenerationFailed
error carries the last reason back to the caller.
"""

import base64
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from google import genai
from google.genai import types

DEFAULT_MODEL = "gemini-2.0-flash-exp-image-generation"
DEFAULT_RETRIES = 3
RETRY_DELAY_SECONDS = 1.0


class GenerationFailed(Exception):
    """Raised when no image could be obtained within the retry budget."""


@dataclass(frozen=True)
class GeneratedImage:
    data: bytes
    mime_type: str


class GeminiImageGenerator:
    """
    Thin wrapper over `client.models.generate_content_stream`.

    Args:
        client: A google-genai Client (or anything with the same `models` API).
        model (str): Model name to stream from.
        retries (int): Total attempts before giving up.
        sleep (callable): Wait function, in seconds. Tests pass a recorder.
    """

    def __init__(
        self,
        client,
        model: str = DEFAULT_MODEL,
        retries: int = DEFAULT_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.model = model
        self.retries = retries
        self.sleep = sleep

    @classmethod
    def from_api_key(cls, api_key: str, model: str = DEFAULT_MODEL) -> "GeminiImageGenerator":
        return cls(genai.Client(api_key=api_key), model=model)

    def _config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            response_modalities=["IMAGE", "TEXT"],
            temperature=1.0,
            top_p=0.95,
            top_k=40,
            max_output_tokens=8192,
        )

    def _stream_image(self, prompt: str) -> Optional[GeneratedImage]:
        contents = [
            types.Content(role="user", parts=[types.Part.from_text(text=prompt)]),
        ]
        stream = self.client.models.generate_content_stream(
            model=self.model,
            contents=contents,
            config=self._config(),
        )

        for chunk in stream:
            candidates = getattr(chunk, "candidates", None)
            if not candidates or not candidates[0].content or not candidates[0].content.parts:
                continue

            part = candidates[0].content.parts[0]
            inline_data = getattr(part, "inline_data", None)
            if inline_data is not None:
                mime_type = inline_data.mime_type or ""
                if mime_type.startswith("image/") and inline_data.data:
                    logging.info(f"[Gemini] Image data received ({mime_type})")
                    return GeneratedImage(data=_as_bytes(inline_data.data), mime_type=mime_type)
            elif getattr(part, "text", None):
                logging.info(f"[Gemini] Text response: {part.text}")

        return None

    def generate(self, prompt: str) -> GeneratedImage:
        """
        Generate an image for a prompt.

        Returns:
            GeneratedImage: Raw image bytes and their MIME type.

        Raises:
            GenerationFailed: If every attempt failed or returned no image.
        """
        last_error = None

        for attempt in range(1, self.retries + 1):
            try:
                logging.info(f"[Gemini] Attempt {attempt}: generating image with model {self.model}")
                image = self._stream_image(prompt)
                if image is not None:
                    return image
                last_error = None
                logging.error("[Gemini] No image data found in the response")
            except Exception as e:
                last_error = e
                logging.error(f"[Gemini] Error in attempt {attempt}: {e}")

            if attempt < self.retries:
                delay = RETRY_DELAY_SECONDS * attempt
                logging.info(f"[Gemini] Retrying in {int(delay * 1000)}ms...")
                self.sleep(delay)

        if last_error is not None:
            raise GenerationFailed(
                f"Failed to generate image after {self.retries} attempts: {last_error}"
            ) from last_error
        raise GenerationFailed(
            f"Failed to generate image after {self.retries} attempts: no image data returned"
        )


def _as_bytes(data) -> bytes:
    # The SDK hands back raw bytes; older payloads arrive base64-encoded
    if isinstance(data, str):
        return base64.b64decode(data)
    return bytes(data)
