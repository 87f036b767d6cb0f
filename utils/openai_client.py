from __future__ import annotations

import os
from typing import Optional

from loguru import logger
from openai import AsyncOpenAI

from core.copy_models import (
    CollectionSeo,
    MarketingCopyInput,
    PlanInterval,
    PricingPlanSeo,
    ProductSeo,
)
from core.fallbacks import fill_catalog_seo, fill_pricing_plan_seo
from core.prompts import SYSTEM_PROMPT
from core.prompts_catalog import (
    get_collection_seo_prompt,
    get_pricing_plan_seo_prompt,
    get_product_seo_prompt,
    plan_price_text,
)
from utils.llm_client import LLMClient

OPENAI_MODEL = "gpt-4o-mini"
CATALOG_SEO_TOKENS = 2000


class OpenAILLMClient(LLMClient):
    """
    LLMClient backed by OpenAI chat completions.

    The SDK client is created on first use (so importing this module needs
    no API key) unless one is injected, which is how tests stub the network.
    Catalog SEO (products, collections, pricing plans) only exists here.
    """

    provider = "openai"

    def __init__(self, client: Optional[AsyncOpenAI] = None) -> None:
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            api_key = os.getenv("OPENAI_API_KEY", "")
            if not api_key:
                logger.warning("OpenAILLMClient: OPENAI_API_KEY not set; requests will be rejected.")
            self._client = AsyncOpenAI(api_key=api_key)
        return self._client

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        completion = await self.client.chat.completions.create(
            model=OPENAI_MODEL,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    # ------------------------------------------------------------------ #
    # Catalog SEO
    # ------------------------------------------------------------------ #

    async def generate_product_seo(
        self,
        store: MarketingCopyInput,
        product_name: str,
        product_description: Optional[str] = None,
        price_in_cents: Optional[int] = None,
    ) -> ProductSeo:
        seo = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_product_seo_prompt(store, product_name, product_description, price_in_cents),
            ProductSeo(),
            max_tokens=CATALOG_SEO_TOKENS,
            schema=ProductSeo,
        )
        return fill_catalog_seo(seo, store, product_name, product_description, price_in_cents)

    async def generate_collection_seo(
        self,
        store: MarketingCopyInput,
        collection_name: str,
        collection_description: Optional[str] = None,
    ) -> CollectionSeo:
        seo = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_collection_seo_prompt(store, collection_name, collection_description),
            CollectionSeo(),
            max_tokens=CATALOG_SEO_TOKENS,
            schema=CollectionSeo,
        )
        return fill_catalog_seo(seo, store, collection_name, collection_description)

    async def generate_pricing_plan_seo(
        self,
        store: MarketingCopyInput,
        plan_name: str,
        plan_description: Optional[str] = None,
        price_in_cents: Optional[int] = None,
        interval: Optional[PlanInterval] = None,
    ) -> PricingPlanSeo:
        seo = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_pricing_plan_seo_prompt(store, plan_name, plan_description, price_in_cents, interval),
            PricingPlanSeo(),
            max_tokens=CATALOG_SEO_TOKENS,
            schema=PricingPlanSeo,
        )
        return fill_pricing_plan_seo(
            seo,
            store,
            plan_name,
            plan_description,
            plan_price_text(price_in_cents, interval),
        )
