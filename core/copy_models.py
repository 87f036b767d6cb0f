from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

AIProvider = Literal["openai", "gemini"]


def is_blank(value: Any) -> bool:
    """True for None, "", empty containers and dicts whose values are all blank."""
    if isinstance(value, dict):
        return all(is_blank(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return value is None or value == ""


class CopyModel(BaseModel):
    """Base for every payload: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def is_empty(self) -> bool:
        return is_blank(self.model_dump())


# ------------------------------------------------------------
# Inputs
# ------------------------------------------------------------
class MarketingCopyInput(CopyModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    business_name: str
    category: str
    city: str
    state: str
    rating: Optional[float] = None
    review_count: Optional[int] = None
    google_about: Optional[str] = None
    website: Optional[str] = None
    price_range: Optional[str] = None
    review_highlights: Optional[str] = None
    business_types: List[str] = []
    address: Optional[str] = None
    opening_hours: Dict[str, str] = {}
    business_attributes: List[str] = []


class ServiceDescriptionInput(CopyModel):
    business_name: str
    category: str
    existing_services: List[str] = []


class PlaceReview(CopyModel):
    rating: float
    text: Optional[str] = None


class BusinessClassificationInput(CopyModel):
    business_name: str
    primary_type: Optional[str] = None
    reviews: List[PlaceReview] = []


class PlanInterval(str, Enum):
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    ONE_TIME = "ONE_TIME"


# ------------------------------------------------------------
# Marketing copy aggregate
# ------------------------------------------------------------
class FAQItem(CopyModel):
    question: str
    answer: str


class ServiceItem(CopyModel):
    name: str
    description: str = ""
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    long_description: Optional[str] = None


class StoreContent(CopyModel):
    """What the store-content prompt asks the model for. Every key may be missing."""

    brand_name: Optional[str] = None
    hero_title: Optional[str] = None
    hero_subtitle: Optional[str] = None
    about_section: Optional[str] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    neighborhoods: List[str] = []


class MarketingCopy(CopyModel):
    brand_name: str = ""
    slug: str = ""
    hero_title: str = ""
    hero_subtitle: str = ""
    about_section: str = ""
    seo_title: str = ""
    seo_description: str = ""
    services: List[ServiceItem] = []
    faq: List[FAQItem] = []
    neighborhoods: List[str] = []


# ------------------------------------------------------------
# Institutional pages
# ------------------------------------------------------------
class InstitutionalPageContent(CopyModel):
    title: str = ""
    content: str = ""
    seo_title: str = ""
    seo_description: str = ""


class InstitutionalPages(CopyModel):
    about: InstitutionalPageContent = InstitutionalPageContent()
    contact: InstitutionalPageContent = InstitutionalPageContent()


# ------------------------------------------------------------
# Single-field and catalog SEO payloads
# ------------------------------------------------------------
class CategoryClassification(CopyModel):
    category: Optional[str] = None


class ServiceSeo(CopyModel):
    seo_title: str = ""
    seo_description: str = ""
    long_description: str = ""


class ProductSeo(CopyModel):
    description: str = ""
    seo_title: str = ""
    seo_description: str = ""
    long_description: str = ""


class CollectionSeo(ProductSeo):
    pass


class PricingPlanSeo(CopyModel):
    description: str = ""
    long_description: str = ""
