import json

import httpx
import openai
import pytest

from brand_core import (
    PERSONALITY_FALLBACK,
    BrandGenerator,
    build_brand_prompt,
    parse_brand_result,
)
from config import Settings
from errors import ConfigurationError, GenerationError, InvalidInputError
from models import BRAND_RESULT_SCHEMA, BrandInputs, BrandResult

from fakes import fake_anthropic, fake_openai


def test_prompt_embeds_every_input(inputs):
    prompt = build_brand_prompt(inputs)
    for text in (inputs.industry, inputs.target_audience, "Professional", inputs.business_description):
        assert text in prompt
    assert PERSONALITY_FALLBACK in prompt


def test_prompt_uses_personality_summary_when_present(inputs):
    inputs.personality_summary = "Preferred Brand Vibe: calm"
    prompt = build_brand_prompt(inputs)
    assert "Preferred Brand Vibe: calm" in prompt
    assert PERSONALITY_FALLBACK not in prompt


def test_well_formed_response_yields_full_result(settings, inputs, payload):
    client = fake_openai(json.dumps(payload))
    result = BrandGenerator(settings, openai_client=client).generate_brand_identity(inputs)

    assert isinstance(result, BrandResult)
    assert len(result.brand_names) == len(payload["brandNames"])
    assert all(color.hex.startswith("#") for color in result.color_palette)
    assert result.social_starter_kit.launch_post.platform == "LinkedIn"
    assert result.brand_voice.words_to_avoid == ["revolutionary", "disrupt"]


def test_request_carries_strict_schema(settings, inputs, payload):
    client = fake_openai(json.dumps(payload))
    BrandGenerator(settings, openai_client=client).generate_brand_identity(inputs)

    kwargs = client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == settings.text_model
    fmt = kwargs["response_format"]
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["strict"] is True
    assert fmt["json_schema"]["schema"] is BRAND_RESULT_SCHEMA
    assert "HealthTech" in kwargs["messages"][-1]["content"]


@pytest.mark.parametrize(
    "path",
    [
        ("taglines",),
        ("customerPersona", "painPoints"),
        ("socialStarterKit", "engagementPost", "caption"),
        ("socialBio", "linkedin"),
    ],
)
def test_missing_required_field_is_an_error(settings, inputs, payload, path):
    node = payload
    for key in path[:-1]:
        node = node[key]
    del node[path[-1]]
    client = fake_openai(json.dumps(payload))

    with pytest.raises(GenerationError) as info:
        BrandGenerator(settings, openai_client=client).generate_brand_identity(inputs)
    assert path[-1] in str(info.value)


def test_missing_field_in_list_item_is_an_error(settings, inputs, payload):
    del payload["brandNames"][1]["meaning"]
    client = fake_openai(json.dumps(payload))
    with pytest.raises(GenerationError):
        BrandGenerator(settings, openai_client=client).generate_brand_identity(inputs)


@pytest.mark.parametrize("text", [None, "", "   ", "not json", "[1, 2, 3]"])
def test_empty_or_unparseable_text_is_an_error(settings, inputs, text):
    client = fake_openai(text)
    with pytest.raises(GenerationError):
        BrandGenerator(settings, openai_client=client).generate_brand_identity(inputs)


def test_fenced_json_is_accepted(payload):
    text = "```json\n" + json.dumps(payload) + "\n```"
    assert parse_brand_result(text).names()[0] == "Nimbus"


def test_upstream_exception_becomes_generation_error(settings, inputs):
    error = openai.APIConnectionError(request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    client = fake_openai(error=error)
    with pytest.raises(GenerationError) as info:
        BrandGenerator(settings, openai_client=client).generate_brand_identity(inputs)
    assert isinstance(info.value.__cause__, openai.APIConnectionError)


def test_incomplete_inputs_never_reach_upstream(settings, payload):
    client = fake_openai(json.dumps(payload))
    with pytest.raises(InvalidInputError):
        BrandGenerator(settings, openai_client=client).generate_brand_identity(BrandInputs(industry="HealthTech"))
    client.chat.completions.create.assert_not_called()


def test_missing_credential_is_a_configuration_error(inputs):
    generator = BrandGenerator(Settings(openai_api_key=""))
    with pytest.raises(ConfigurationError) as info:
        generator.generate_brand_identity(inputs)
    assert info.value.key == "OPENAI_API_KEY"


def test_anthropic_tool_call_yields_result(settings, inputs, payload):
    settings.text_provider = "anthropic"
    client = fake_anthropic(payload)
    result = BrandGenerator(settings, anthropic_client=client).generate_brand_identity(inputs)

    assert result.names() == ["Nimbus", "Pulsewright", "Clarion"]
    kwargs = client.messages.create.call_args.kwargs
    assert kwargs["tool_choice"] == {"type": "tool", "name": "brand_identity"}
    assert kwargs["tools"][0]["input_schema"] is BRAND_RESULT_SCHEMA


def test_anthropic_without_tool_call_is_an_error(settings, inputs):
    settings.text_provider = "anthropic"
    with pytest.raises(GenerationError):
        BrandGenerator(settings, anthropic_client=fake_anthropic(None)).generate_brand_identity(inputs)
