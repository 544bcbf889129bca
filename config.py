"""Settings loaded from the environment (and a local .env file if present)."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from dotenv import load_dotenv

from errors import ConfigurationError

load_dotenv()

TEXT_PROVIDERS = ("openai", "anthropic")
IMAGE_PROVIDERS = ("huggingface", "replicate")

DEFAULT_TEXT_MODELS = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-sonnet-4-5",
}

DEFAULT_HF_MODEL_URL = (
    "https://router.huggingface.co/hf-inference/models/stabilityai/stable-diffusion-xl-base-1.0"
)
DEFAULT_REPLICATE_MODEL = "recraft-ai/recraft-v3"
DEFAULT_RELAY_URL = "http://localhost:3001/generate-logo"

# Attribute name -> environment variable, for credentials checked at first use.
_SECRET_ENV = {
    "openai_api_key": "OPENAI_API_KEY",
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "hf_api_key": "HF_API_KEY",
    "replicate_api_token": "REPLICATE_API_TOKEN",
}


@dataclass
class Settings:
    text_provider: str = "openai"
    text_model: str = DEFAULT_TEXT_MODELS["openai"]
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    image_provider: str = "huggingface"
    hf_api_key: str = ""
    hf_model_url: str = DEFAULT_HF_MODEL_URL
    replicate_api_token: str = ""
    replicate_model: str = DEFAULT_REPLICATE_MODEL
    guidance_scale: float = 7.5
    num_inference_steps: int = 30
    image_size: int = 1024

    relay_url: str = DEFAULT_RELAY_URL
    relay_port: int = 3001
    port: int = 5000
    request_timeout: float = 120.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.text_provider not in TEXT_PROVIDERS:
            raise ValueError(f"text_provider must be one of {TEXT_PROVIDERS}, got {self.text_provider!r}")
        if self.image_provider not in IMAGE_PROVIDERS:
            raise ValueError(f"image_provider must be one of {IMAGE_PROVIDERS}, got {self.image_provider!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        provider = env.get("BRAND_TEXT_PROVIDER", "openai").strip().lower() or "openai"
        return cls(
            text_provider=provider,
            text_model=env.get("BRAND_TEXT_MODEL") or DEFAULT_TEXT_MODELS.get(provider, ""),
            openai_api_key=env.get("OPENAI_API_KEY", ""),
            anthropic_api_key=env.get("ANTHROPIC_API_KEY", ""),
            image_provider=env.get("LOGO_IMAGE_PROVIDER", "huggingface").strip().lower() or "huggingface",
            hf_api_key=env.get("HF_API_KEY", ""),
            hf_model_url=env.get("HF_MODEL_URL") or DEFAULT_HF_MODEL_URL,
            replicate_api_token=env.get("REPLICATE_API_TOKEN", ""),
            replicate_model=env.get("LOGO_REPLICATE_MODEL") or DEFAULT_REPLICATE_MODEL,
            guidance_scale=float(env.get("LOGO_GUIDANCE_SCALE", 7.5)),
            num_inference_steps=int(env.get("LOGO_INFERENCE_STEPS", 30)),
            image_size=int(env.get("LOGO_IMAGE_SIZE", 1024)),
            relay_url=env.get("LOGO_RELAY_URL") or DEFAULT_RELAY_URL,
            relay_port=int(env.get("RELAY_PORT", 3001)),
            port=int(env.get("PORT", 5000)),
            request_timeout=float(env.get("REQUEST_TIMEOUT", 120)),
            log_level=env.get("LOG_LEVEL", "INFO"),
        )

    def require(self, attr: str) -> str:
        """Return a credential, raising ConfigurationError if it is blank."""
        value = getattr(self, attr)
        if not value:
            raise ConfigurationError(_SECRET_ENV.get(attr, attr.upper()))
        return value

    @property
    def text_api_key_name(self) -> str:
        return "anthropic_api_key" if self.text_provider == "anthropic" else "openai_api_key"

    @property
    def image_api_key_name(self) -> str:
        return "replicate_api_token" if self.image_provider == "replicate" else "hf_api_key"

    def public_dict(self) -> dict:
        """Settings without secrets, for logging and the health endpoint."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name not in _SECRET_ENV}
