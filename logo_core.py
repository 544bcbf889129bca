"""Server-side logo rendering: prompt construction, upstream image backends, data URIs.

Used by the relay (which holds the image credential) and by the CLI in
``--direct`` mode.  Every failure is raised as a LogoError with a reason the
caller can show to the user.
"""

from __future__ import annotations

import base64
import binascii
import logging
import time
from typing import Any, Optional, Tuple

import requests

import errors
from config import Settings
from errors import LogoError

log = logging.getLogger(__name__)

NEGATIVE_PROMPT = (
    "text, letters, words, typography, watermark, signature, logo text, caption, "
    "blurry, photo, photorealistic, 3d render, cluttered background"
)

_SIGNATURES: Tuple[Tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
)

_SAFETY_MARKERS = ("nsfw", "safety", "sensitive", "content policy", "inappropriate")


def build_logo_prompt(name: str, industry: str, tone: str) -> str:
    return (
        f"Minimalist flat vector logo mark for a brand called {name} in the {industry} industry, "
        f"{tone.lower()} tone. Simple geometric brand icon, centered on a plain white background, "
        "square composition, clean shapes, strong contrast, legible at small sizes. "
        "No text, no letters, no words, no watermark."
    )


def sniff_mime(data: bytes) -> Optional[str]:
    for magic, mime in _SIGNATURES:
        if data.startswith(magic):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return None


def to_data_uri(data: bytes, content_type: Optional[str] = None) -> str:
    """Encode image bytes as a self-contained ``data:`` URI."""
    if not data:
        raise LogoError(errors.EMPTY, "Image service returned an empty payload")
    mime = sniff_mime(data)
    if mime is None:
        declared = (content_type or "").split(";")[0].strip().lower()
        if not declared.startswith("image/"):
            raise LogoError(errors.MALFORMED, f"Image service returned non-image content ({declared or 'unknown'})")
        mime = declared
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """Split a ``data:<mime>;base64,<payload>`` URI into (mime, bytes)."""
    if not isinstance(uri, str) or not uri.startswith("data:image/"):
        raise LogoError(errors.MALFORMED, "Not an image data URI")
    header, _, payload = uri.partition(",")
    if not header.endswith(";base64") or not payload:
        raise LogoError(errors.MALFORMED, "Image data URI is not base64 encoded")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise LogoError(errors.MALFORMED, "Image data URI payload is not valid base64") from exc
    return header[len("data:"):-len(";base64")], data


def classify_failure(status: Optional[int], text: str) -> str:
    """Map an upstream status code / error text onto a LogoError reason."""
    lowered = (text or "").lower()
    if any(marker in lowered for marker in _SAFETY_MARKERS):
        return errors.SAFETY_BLOCKED
    if status in (402, 429) or "rate limit" in lowered or "quota" in lowered or "payment" in lowered:
        return errors.RATE_LIMITED
    if status is not None and status >= 500:
        return errors.UNREACHABLE
    return errors.UPSTREAM_ERROR


# ---------------------------------------------------------------------------
# Upstream backends
# ---------------------------------------------------------------------------

class HuggingFaceImageBackend:
    """Text-to-image inference endpoint that answers with raw image bytes."""

    name = "huggingface"

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.settings = settings
        self.session = session or requests.Session()

    def generate(self, prompt: str, negative_prompt: str = NEGATIVE_PROMPT) -> str:
        api_key = self.settings.require("hf_api_key")
        size = self.settings.image_size
        payload = {
            "inputs": prompt,
            "parameters": {
                "negative_prompt": negative_prompt,
                "guidance_scale": self.settings.guidance_scale,
                "num_inference_steps": self.settings.num_inference_steps,
                "width": size,
                "height": size,
            },
            "options": {"wait_for_model": True},
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": "image/png",
            "x-use-cache": "false",
        }
        try:
            resp = self.session.post(
                self.settings.hf_model_url,
                json=payload,
                headers=headers,
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as exc:
            raise LogoError(errors.UNREACHABLE, f"Image service unreachable: {exc}") from exc

        content_type = resp.headers.get("Content-Type", "")
        if resp.status_code != 200:
            body = resp.text[:500]
            reason = classify_failure(resp.status_code, body)
            log.warning("HF image error %d (%s): %s", resp.status_code, reason, body)
            raise LogoError(reason, f"Image service error ({resp.status_code})")

        if "json" in content_type:
            # A 200 with JSON instead of bytes carries an error message.
            body = resp.text[:500]
            reason = classify_failure(None, body)
            raise LogoError(
                reason if reason == errors.SAFETY_BLOCKED else errors.MALFORMED,
                "Image service returned JSON instead of an image",
            )
        return to_data_uri(resp.content, content_type)


class ReplicateImageBackend:
    """Replicate prediction; the output URL is downloaded and inlined."""

    name = "replicate"

    def __init__(
        self,
        settings: Settings,
        client: Optional[Any] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.settings = settings
        self._client = client
        self.session = session or requests.Session()

    def _replicate(self) -> Any:
        if self._client is None:
            import replicate as rep
            self._client = rep.Client(api_token=self.settings.require("replicate_api_token"))
        return self._client

    def build_input(self, prompt: str, negative_prompt: str) -> dict:
        model = self.settings.replicate_model
        size = self.settings.image_size

        # Google nano-banana family
        if "nano-banana" in model:
            return {"prompt": prompt, "aspect_ratio": "1:1", "output_format": "png"}

        # Recraft v3
        if "recraft" in model:
            return {"prompt": prompt, "size": f"{size}x{size}", "style": "digital_illustration"}

        # Ideogram
        if "ideogram" in model:
            return {
                "prompt": prompt,
                "negative_prompt": negative_prompt,
                "aspect_ratio": "1:1",
                "resolution": f"{size}x{size}",
            }

        # Stable Diffusion style models take the classic sampler knobs
        if "stable-diffusion" in model or "sdxl" in model:
            return {
                "prompt": prompt,
                "negative_prompt": negative_prompt,
                "guidance_scale": self.settings.guidance_scale,
                "num_inference_steps": self.settings.num_inference_steps,
                "width": size,
                "height": size,
            }

        # FLUX standard (flux-1.1-pro, flux-schnell, flux-dev)
        return {
            "prompt": prompt,
            "aspect_ratio": "1:1",
            "output_format": "png",
            "safety_tolerance": 2,
        }

    def generate(self, prompt: str, negative_prompt: str = NEGATIVE_PROMPT) -> str:
        model = self.settings.replicate_model
        client = self._replicate()
        t0 = time.time()
        try:
            prediction = client.predictions.create(
                model=model, input=self.build_input(prompt, negative_prompt)
            )
            prediction.wait()
        except LogoError:
            raise
        except Exception as exc:
            err = str(exc)
            log.error("Replicate error after %.1fs: %s", time.time() - t0, err)
            status = getattr(exc, "status", None)
            if "401" in err or "authentication" in err.lower():
                raise LogoError(
                    errors.UPSTREAM_ERROR,
                    "Replicate API token is invalid or expired. Check your REPLICATE_API_TOKEN.",
                ) from exc
            if isinstance(exc, (requests.RequestException, ConnectionError, TimeoutError)):
                raise LogoError(errors.UNREACHABLE, f"Replicate unreachable: {err}") from exc
            raise LogoError(classify_failure(status, err), f"Replicate request failed: {err}") from exc

        if prediction.status != "succeeded":
            err = str(prediction.error or prediction.status)
            raise LogoError(classify_failure(None, err), f"Replicate prediction {prediction.status}: {err}")

        log.info("Replicate logo: model=%s  %.1fs", model, time.time() - t0)

        raw_output = prediction.output
        if isinstance(raw_output, list):
            raw_output = raw_output[0] if raw_output else None
        if not raw_output:
            raise LogoError(errors.EMPTY, "Replicate returned no output")
        url = getattr(raw_output, "url", None) or str(raw_output)
        if url.startswith("data:"):
            decode_data_uri(url)
            return url
        return self._download(url)

    def _download(self, url: str) -> str:
        try:
            resp = self.session.get(url, timeout=self.settings.request_timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise LogoError(errors.UNREACHABLE, f"Could not download generated image: {exc}") from exc
        return to_data_uri(resp.content, resp.headers.get("Content-Type"))


def image_backend(settings: Settings) -> Any:
    if settings.image_provider == "replicate":
        return ReplicateImageBackend(settings)
    return HuggingFaceImageBackend(settings)


class LogoRenderer:
    """Renders one logo per call; calls for different names share nothing but the backend."""

    def __init__(self, backend: Any) -> None:
        self.backend = backend

    def render(self, name: str, industry: str, tone: str) -> str:
        prompt = build_logo_prompt(name, industry, tone)
        backend_name = getattr(self.backend, "name", type(self.backend).__name__)
        log.info("Logo requested: name=%r industry=%r tone=%s via %s", name, industry, tone, backend_name)
        t0 = time.time()
        try:
            uri = self.backend.generate(prompt, NEGATIVE_PROMPT)
        except LogoError as exc:
            log.warning("Logo failed: name=%r reason=%s  %s", name, exc.reason, exc.message)
            raise
        log.info("Logo ready: name=%r  %d chars  %.1fs", name, len(uri), time.time() - t0)
        return uri
