"""
Single entry point for AI copywriting.

The provider is chosen once, at import, from AI_PROVIDER ("openai" by
default, or "gemini"). Catalog SEO exists only for OpenAI and always goes
there, whatever AI_PROVIDER says.
"""
import os
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from core.copy_models import (
    AIProvider,
    BusinessClassificationInput,
    CollectionSeo,
    InstitutionalPages,
    MarketingCopy,
    MarketingCopyInput,
    PlanInterval,
    PricingPlanSeo,
    ProductSeo,
    ServiceDescriptionInput,
    ServiceItem,
    ServiceSeo,
)
from utils.error_utils import log_provider_errors
from utils.llm_client import LLMClient, get_llm_client
from utils.openai_client import OpenAILLMClient

# ---------------------------------------------------------------------------
# Load environment from project-level .env
# ---------------------------------------------------------------------------
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
ENV_PATH = os.path.join(BASE_DIR, ".env")

load_dotenv(ENV_PATH)

AI_PROVIDER = os.getenv("AI_PROVIDER", "openai").strip().lower()

logger.info(
    "AI ENV: AI_PROVIDER={!r}, OPENAI_API_KEY_SET={}, GEMINI_API_KEY_SET={}",
    AI_PROVIDER,
    bool(os.getenv("OPENAI_API_KEY")),
    bool(os.getenv("GEMINI_API_KEY")),
)

# ---------------------------------------------------------------------------
# Clients (tests monkeypatch _llm_client / _catalog_client)
# ---------------------------------------------------------------------------
_llm_client: LLMClient = get_llm_client(AI_PROVIDER)
_catalog_client: OpenAILLMClient = (
    _llm_client if isinstance(_llm_client, OpenAILLMClient) else OpenAILLMClient()
)


def get_active_provider() -> AIProvider:
    return "gemini" if _llm_client.provider == "gemini" else "openai"


@log_provider_errors
async def generate_marketing_copy(data: MarketingCopyInput) -> MarketingCopy:
    return await _llm_client.generate_marketing_copy(data)


@log_provider_errors
async def generate_service_descriptions(data: ServiceDescriptionInput) -> List[ServiceItem]:
    return await _llm_client.generate_service_descriptions(data)


@log_provider_errors
async def classify_business_category(data: BusinessClassificationInput) -> Optional[str]:
    return await _llm_client.classify_business_category(data)


@log_provider_errors
async def generate_service_seo(
    data: MarketingCopyInput,
    service_name: str,
    service_description: Optional[str] = None,
) -> ServiceSeo:
    return await _llm_client.generate_service_seo(data, service_name, service_description)


@log_provider_errors
async def generate_institutional_pages(data: MarketingCopyInput) -> InstitutionalPages:
    return await _llm_client.generate_institutional_pages(data)


# ---------------------------------------------------------------------------
# Catalog SEO (OpenAI only)
# ---------------------------------------------------------------------------
@log_provider_errors
async def generate_product_seo(
    store: MarketingCopyInput,
    product_name: str,
    product_description: Optional[str] = None,
    price_in_cents: Optional[int] = None,
) -> ProductSeo:
    return await _catalog_client.generate_product_seo(
        store, product_name, product_description, price_in_cents
    )


@log_provider_errors
async def generate_collection_seo(
    store: MarketingCopyInput,
    collection_name: str,
    collection_description: Optional[str] = None,
) -> CollectionSeo:
    return await _catalog_client.generate_collection_seo(store, collection_name, collection_description)


@log_provider_errors
async def generate_pricing_plan_seo(
    store: MarketingCopyInput,
    plan_name: str,
    plan_description: Optional[str] = None,
    price_in_cents: Optional[int] = None,
    interval: Optional[PlanInterval] = None,
) -> PricingPlanSeo:
    return await _catalog_client.generate_pricing_plan_seo(
        store, plan_name, plan_description, price_in_cents, interval
    )
