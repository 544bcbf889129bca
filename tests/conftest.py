import pytest

from config import Settings
from models import BrandInputs, BrandResult

from fakes import brand_payload


@pytest.fixture
def settings():
    return Settings(
        openai_api_key="sk-test",
        anthropic_api_key="ak-test",
        hf_api_key="hf-test",
        replicate_api_token="r8-test",
        request_timeout=5,
    )


@pytest.fixture
def inputs():
    return BrandInputs(
        business_description="An integration layer that keeps clinic software compliant.",
        industry="HealthTech",
        target_audience="Professional Developers",
        tone="Professional",
    )


@pytest.fixture
def payload():
    return brand_payload()


@pytest.fixture
def result(payload):
    return BrandResult.model_validate(payload)
