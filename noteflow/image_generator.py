"""Diagram Image Generator

Client for the Hugging Face inference API that turns a diagram prompt
into PNG/JPEG bytes.
"""
import logging
import os
import random
from typing import Optional

import requests

from .config import (
    HF_GUIDANCE_SCALE,
    HF_IMAGE_HEIGHT,
    HF_IMAGE_MODEL_URL,
    HF_IMAGE_WIDTH,
    HF_INFERENCE_STEPS,
    HF_REQUEST_TIMEOUT,
)
from .exceptions import ImageGenerationAPIError, ModelLoadingError, RateLimitedError

logger = logging.getLogger(__name__)


class DiagramImageClient:
    """Client for text-to-image generation of concept diagrams."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_url: str = HF_IMAGE_MODEL_URL,
        timeout: float = HF_REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the image generation client.

        Args:
            api_key: Hugging Face API key. If None, reads from HUGGINGFACE_API_KEY env var.
            model_url: Inference endpoint of the model
            timeout: Request timeout in seconds
            session: Optional requests session (shared connection pool)
            logger: Logger for request outcomes
        """
        self.api_key = api_key or os.getenv("HUGGINGFACE_API_KEY")
        if not self.api_key:
            raise ValueError(
                "HUGGINGFACE_API_KEY not found. "
                "Set it in .env file or pass as parameter."
            )

        self.model_url = model_url
        self.timeout = timeout
        self.http = session or requests
        self._logger = logger or globals()["logger"]
        self.headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, prompt: str, seed: Optional[int] = None) -> dict:
        return {
            "inputs": prompt,
            "parameters": {
                "guidance_scale": HF_GUIDANCE_SCALE,
                "num_inference_steps": HF_INFERENCE_STEPS,
                "width": HF_IMAGE_WIDTH,
                "height": HF_IMAGE_HEIGHT,
                "seed": seed if seed is not None else random.randint(0, 2147483646),
            },
        }

    def generate(self, prompt: str, seed: Optional[int] = None) -> bytes:
        """
        Generate one diagram image.

        Args:
            prompt: Image generation prompt
            seed: Optional fixed seed (random otherwise)

        Returns:
            Raw image bytes as returned by the API

        Raises:
            RateLimitedError: On HTTP 429 or a rate-limit error message
            ModelLoadingError: On HTTP 503 or a model-loading message
            ImageGenerationAPIError: On any other non-success response or an empty body
            requests.RequestException: On network failures and timeouts
        """
        response = self.http.post(
            self.model_url,
            headers=self.headers,
            json=self.build_payload(prompt, seed),
            timeout=self.timeout,
        )

        if not response.ok:
            message = self._error_message(response)
            lowered = message.lower()
            if response.status_code == 429 or "rate limit" in lowered:
                raise RateLimitedError()
            if response.status_code == 503 or "loading" in lowered:
                raise ModelLoadingError(message)
            raise ImageGenerationAPIError(response.status_code, message)

        if not response.content:
            raise ImageGenerationAPIError(response.status_code, "empty image body")

        self._logger.debug("Generated diagram image: %d bytes", len(response.content))
        return response.content

    @staticmethod
    def _error_message(response) -> str:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                data = response.json()
            except ValueError:
                data = None
            error = data.get("error") if isinstance(data, dict) else None
            if error:
                return str(error)
        return f"{response.status_code} {response.reason or ''}".strip()
