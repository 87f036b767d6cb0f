from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from loguru import logger

from core.copy_models import (
    BusinessClassificationInput,
    CategoryClassification,
    FAQItem,
    InstitutionalPages,
    MarketingCopy,
    MarketingCopyInput,
    ServiceDescriptionInput,
    ServiceItem,
    ServiceSeo,
    StoreContent,
    is_blank,
)
from core.fallbacks import (
    apply_fallbacks,
    apply_institutional_fallbacks,
    category_from_place_type,
    fill_service_seo,
    normalize_category_name,
)
from core.prompts import (
    SYSTEM_PROMPT,
    get_category_classification_prompt,
    get_faq_prompt,
    get_institutional_pages_prompt,
    get_service_description_prompt,
    get_service_names_prompt,
    get_service_seo_prompt,
    get_services_prompt,
    get_store_content_prompt,
)
from utils.json_repair import safe_parse_json

FIRST_TEMPERATURE = 0.7
RETRY_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 4000

SERVICE_BATCH_SIZE = 3
MAX_SERVICES = 6

# Output budgets per call.
STORE_CONTENT_TOKENS = 2000
FAQ_TOKENS = 3000
SERVICE_NAMES_TOKENS = 500
SERVICES_TOKENS = 4000
SERVICE_SEO_TOKENS = 2000
CLASSIFICATION_TOKENS = 100
INSTITUTIONAL_TOKENS = 3000


def _is_empty_result(value: Any) -> bool:
    if hasattr(value, "is_empty"):
        return value.is_empty()
    return is_blank(value)


class LLMClient(ABC):
    """
    Provider-agnostic copywriting client.

    Subclasses only know how to send one (system, user) prompt pair to their
    provider and return the raw text. Everything else lives here:

    - call_with_retry(...)  -> parse JSON, one retry at lower temperature
    - generate_*(...)       -> the copy pipelines, gap-filled by fallbacks

    Transport errors raised by `complete` are never caught here.
    """

    provider = "llm"

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        *,
        max_tokens: int,
        temperature: float,
    ) -> str:
        """Send one chat turn and return the raw reply text ("" when the provider gave none)."""

    # ------------------------------------------------------------------ #
    # Retry orchestration
    # ------------------------------------------------------------------ #

    async def call_with_retry(
        self,
        system_prompt: str,
        user_prompt: str,
        fallback: Any,
        *,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        schema: Any = None,
    ) -> Any:
        """
        Ask once at FIRST_TEMPERATURE. When the reply does not parse (or
        parses to nothing: None, [], {} or an all-empty model) ask exactly
        once more at RETRY_TEMPERATURE and parse that reply with `fallback`,
        so an unusable second reply returns `fallback` itself.
        """
        text = await self.complete(
            system_prompt, user_prompt, max_tokens=max_tokens, temperature=FIRST_TEMPERATURE
        )
        value = safe_parse_json(text, None, schema)
        if value is not None and not _is_empty_result(value):
            return value

        logger.warning(
            "[{}] empty or invalid JSON at temperature {}; retrying at {}",
            self.provider,
            FIRST_TEMPERATURE,
            RETRY_TEMPERATURE,
        )
        text = await self.complete(
            system_prompt, user_prompt, max_tokens=max_tokens, temperature=RETRY_TEMPERATURE
        )
        return safe_parse_json(text, fallback, schema)

    # ------------------------------------------------------------------ #
    # Marketing copy
    # ------------------------------------------------------------------ #

    async def _generate_services(self, data: MarketingCopyInput, names: List[str]) -> List[ServiceItem]:
        services: List[ServiceItem] = []
        batches = [names[i : i + SERVICE_BATCH_SIZE] for i in range(0, len(names), SERVICE_BATCH_SIZE)]
        for index, batch in enumerate(batches):
            first = index * SERVICE_BATCH_SIZE + 1
            logger.info(
                "[{}] step 4{}/4: SEO for services {}-{}",
                self.provider,
                "ab"[index],
                first,
                first + len(batch) - 1,
            )
            items = await self.call_with_retry(
                SYSTEM_PROMPT,
                get_services_prompt(data, batch),
                [],
                max_tokens=SERVICES_TOKENS,
                schema=List[ServiceItem],
            )
            services.extend(items)
        return services

    async def generate_marketing_copy(self, data: MarketingCopyInput) -> MarketingCopy:
        """
        Full landing-page copy, built from four sequential calls:
        store content, FAQ, service names, then service SEO in batches of
        three (one or two calls). Every gap is filled by apply_fallbacks.
        """
        logger.info("[{}] step 1/4: store content for {!r}", self.provider, data.business_name)
        store = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_store_content_prompt(data),
            StoreContent(),
            max_tokens=STORE_CONTENT_TOKENS,
            schema=StoreContent,
        )

        logger.info("[{}] step 2/4: FAQ", self.provider)
        faq = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_faq_prompt(data),
            [],
            max_tokens=FAQ_TOKENS,
            schema=List[FAQItem],
        )

        logger.info("[{}] step 3/4: service names", self.provider)
        names = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_service_names_prompt(data),
            [],
            max_tokens=SERVICE_NAMES_TOKENS,
            schema=List[str],
        )
        names = [name.strip() for name in names if name.strip()][:MAX_SERVICES]

        services = await self._generate_services(data, names) if names else []

        copy = MarketingCopy(
            brand_name=store.brand_name or "",
            hero_title=store.hero_title or "",
            hero_subtitle=store.hero_subtitle or "",
            about_section=store.about_section or "",
            seo_title=store.seo_title or "",
            seo_description=store.seo_description or "",
            neighborhoods=[n for n in store.neighborhoods if n.strip()],
            services=[s for s in services if s.name.strip()],
            faq=[f for f in faq if f.question.strip() and f.answer.strip()],
        )
        logger.info(
            "[{}] generation done: {} services, {} FAQ entries from the model",
            self.provider,
            len(copy.services),
            len(copy.faq),
        )
        return apply_fallbacks(copy, data)

    # ------------------------------------------------------------------ #
    # Single-purpose operations
    # ------------------------------------------------------------------ #

    async def generate_service_descriptions(self, data: ServiceDescriptionInput) -> List[ServiceItem]:
        """New services for the dashboard; names the store already has are dropped."""
        items = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_service_description_prompt(data),
            [],
            max_tokens=SERVICES_TOKENS,
            schema=List[ServiceItem],
        )
        existing = {name.strip().lower() for name in data.existing_services}
        return [
            item
            for item in items
            if item.name.strip() and item.name.strip().lower() not in existing
        ]

    async def classify_business_category(self, data: BusinessClassificationInput) -> Optional[str]:
        result = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_category_classification_prompt(data),
            CategoryClassification(),
            max_tokens=CLASSIFICATION_TOKENS,
            schema=CategoryClassification,
        )
        category = normalize_category_name(result.category)
        if category:
            return category

        fallback = category_from_place_type(data.primary_type)
        logger.warning(
            "[{}] no category from the model for {!r}; place type {!r} -> {!r}",
            self.provider,
            data.business_name,
            data.primary_type,
            fallback,
        )
        return fallback

    async def generate_service_seo(
        self,
        data: MarketingCopyInput,
        service_name: str,
        service_description: Optional[str] = None,
    ) -> ServiceSeo:
        seo = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_service_seo_prompt(data, service_name, service_description),
            ServiceSeo(),
            max_tokens=SERVICE_SEO_TOKENS,
            schema=ServiceSeo,
        )
        return fill_service_seo(seo, data, service_name, service_description)

    async def generate_institutional_pages(self, data: MarketingCopyInput) -> InstitutionalPages:
        pages = await self.call_with_retry(
            SYSTEM_PROMPT,
            get_institutional_pages_prompt(data),
            InstitutionalPages(),
            max_tokens=INSTITUTIONAL_TOKENS,
            schema=InstitutionalPages,
        )
        return apply_institutional_fallbacks(pages, data)


def get_llm_client(provider: Optional[str] = "openai") -> LLMClient:
    """
    Factory: one client per process, chosen by provider name.

    - "gemini"          -> GeminiLLMClient
    - "openai" / other  -> OpenAILLMClient (unknown names are logged)
    """
    name = (provider or "openai").strip().lower()

    if name == "gemini":
        from utils.gemini_client import GeminiLLMClient

        return GeminiLLMClient()

    if name != "openai":
        logger.warning("get_llm_client: unknown AI provider {!r}; using openai", provider)

    from utils.openai_client import OpenAILLMClient

    return OpenAILLMClient()
