"""Brand identity generation: prompt, structured-output call, validation."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional

from pydantic import ValidationError

from config import Settings
from errors import GenerationError
from models import BRAND_RESULT_SCHEMA, BrandInputs, BrandResult

log = logging.getLogger(__name__)

SCHEMA_NAME = "brand_identity"
PERSONALITY_FALLBACK = "infer a suitable personality from the business details"

SYSTEM_PROMPT = (
    "You are an expert brand strategist, marketing consultant, and creative director. "
    "Respond only with the structured brand identity requested. No real brand names."
)


def build_brand_prompt(inputs: BrandInputs) -> str:
    personality = (inputs.personality_summary or "").strip() or PERSONALITY_FALLBACK
    return (
        "Based on the following business information, generate a complete professional "
        "brand identity, strategy, and starter marketing kit.\n\n"
        "Business Context:\n"
        f"- Industry: {inputs.industry}\n"
        f"- Target Audience: {inputs.target_audience}\n"
        f"- Requested Tone: {inputs.tone.value}\n"
        f"- Vision & Description: {inputs.business_description}\n"
        f"- Brand Personality Traits: {personality}\n\n"
        "Provide a structured output including:\n"
        "1. Explanation of brand interpretation (personality, emotional appeal, market positioning).\n"
        "2. Brand personality profile (archetype and desired emotional response).\n"
        "3. Concise brand positioning statement.\n"
        "4. Detailed ideal customer persona (name, age, lifestyle, goals, pain points, discovery).\n"
        "5. Brand voice guidelines (style, words to use/avoid, rules).\n"
        "6. 5 unique brand names with meanings/justifications.\n"
        "7. 5 tagline options.\n"
        "8. Recommended color palette (hex codes like #1E3A8A and emotional reasoning).\n"
        "9. Visual style and moodboard direction.\n"
        "10. Social media starter kit (Instagram, Twitter and LinkedIn bios, launch post, "
        "engagement post, 10 hashtags)."
    )


def parse_brand_result(text: Optional[str]) -> BrandResult:
    """Parse upstream text into a fully populated BrandResult or raise GenerationError."""
    if not text or not text.strip():
        raise GenerationError("No response from AI")
    text = text.strip()
    # Strip markdown fences if present
    if text.startswith("```"):
        lines = text.splitlines()
        text = "\n".join(lines[1:-1] if lines[-1].strip() == "```" else lines[1:])
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise GenerationError(f"Response is not valid JSON: {exc}") from exc
    return validate_brand_result(data)


def validate_brand_result(data: Any) -> BrandResult:
    if not isinstance(data, dict):
        raise GenerationError(f"Expected a JSON object, got {type(data).__name__}")
    try:
        return BrandResult.model_validate(data)
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise GenerationError(
            f"Response does not match the brand schema ({len(problems)} problem(s)): "
            + "; ".join(problems[:5])
        ) from exc


class BrandGenerator:
    """Generates one BrandResult per call via the configured text provider.

    Clients are created lazily so that a missing credential surfaces as a
    ConfigurationError on first use rather than at startup.
    """

    def __init__(
        self,
        settings: Settings,
        openai_client: Optional[Any] = None,
        anthropic_client: Optional[Any] = None,
    ) -> None:
        self.settings = settings
        self._openai = openai_client
        self._anthropic = anthropic_client

    @property
    def provider(self) -> str:
        return self.settings.text_provider

    @property
    def model(self) -> str:
        return self.settings.text_model

    def generate_brand_identity(self, inputs: BrandInputs) -> BrandResult:
        inputs.require_complete()
        prompt = build_brand_prompt(inputs)
        log.info(
            "Brand identity requested: industry=%r tone=%s model=%s/%s",
            inputs.industry, inputs.tone.value, self.provider, self.model,
        )
        t0 = time.time()
        if self.provider == "anthropic":
            result = validate_brand_result(self._call_anthropic(prompt))
        else:
            result = parse_brand_result(self._call_openai(prompt))
        log.info(
            "Brand identity ready: %d names, %d colors  %.1fs",
            len(result.brand_names), len(result.color_palette), time.time() - t0,
        )
        return result

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def _openai_client(self) -> Any:
        if self._openai is None:
            from openai import OpenAI
            self._openai = OpenAI(
                api_key=self.settings.require("openai_api_key"),
                timeout=self.settings.request_timeout,
            )
        return self._openai

    def _anthropic_client(self) -> Any:
        if self._anthropic is None:
            import anthropic
            self._anthropic = anthropic.Anthropic(
                api_key=self.settings.require("anthropic_api_key"),
                timeout=self.settings.request_timeout,
            )
        return self._anthropic

    def _call_openai(self, prompt: str) -> Optional[str]:
        from openai import AuthenticationError, OpenAIError, RateLimitError

        client = self._openai_client()
        t0 = time.time()
        try:
            resp = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": SCHEMA_NAME,
                        "strict": True,
                        "schema": BRAND_RESULT_SCHEMA,
                    },
                },
            )
        except AuthenticationError as exc:
            raise GenerationError("OpenAI API key is invalid or expired.") from exc
        except RateLimitError as exc:
            msg = str(exc)
            if "insufficient_quota" in msg or "quota" in msg.lower():
                raise GenerationError(
                    "OpenAI account is out of credits. "
                    "Please add billing at platform.openai.com."
                ) from exc
            raise GenerationError(f"OpenAI rate limit: {exc}") from exc
        except OpenAIError as exc:
            log.error("OpenAI call failed after %.1fs: %s", time.time() - t0, exc)
            raise GenerationError(f"OpenAI request failed: {exc}") from exc

        usage = getattr(resp, "usage", None)
        if usage is not None:
            log.info(
                "OpenAI call: model=%s  %d in / %d out tokens  %.1fs",
                self.model, usage.prompt_tokens, usage.completion_tokens, time.time() - t0,
            )
        if not resp.choices:
            raise GenerationError("No response from AI")
        message = resp.choices[0].message
        refusal = getattr(message, "refusal", None)
        if refusal:
            raise GenerationError(f"Model refused the request: {refusal}")
        return message.content

    def _call_anthropic(self, prompt: str) -> Dict[str, Any]:
        import anthropic

        client = self._anthropic_client()
        t0 = time.time()
        try:
            msg = client.messages.create(
                model=self.model,
                max_tokens=4096,
                system=SYSTEM_PROMPT,
                tools=[
                    {
                        "name": SCHEMA_NAME,
                        "description": "Record the complete brand identity.",
                        "input_schema": BRAND_RESULT_SCHEMA,
                    }
                ],
                tool_choice={"type": "tool", "name": SCHEMA_NAME},
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AuthenticationError as exc:
            raise GenerationError("Anthropic API key is invalid or expired.") from exc
        except anthropic.RateLimitError as exc:
            raise GenerationError(f"Anthropic rate limit: {exc}") from exc
        except anthropic.APIError as exc:
            log.error("Anthropic call failed after %.1fs: %s", time.time() - t0, exc)
            raise GenerationError(f"Anthropic request failed: {exc}") from exc

        usage = getattr(msg, "usage", None)
        if usage is not None:
            log.info(
                "Anthropic call: model=%s  %d in / %d out tokens  %.1fs",
                self.model, usage.input_tokens, usage.output_tokens, time.time() - t0,
            )
        for block in msg.content or []:
            if getattr(block, "type", None) == "tool_use" and block.name == SCHEMA_NAME:
                return block.input
        raise GenerationError("No response from AI")
