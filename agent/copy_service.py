from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from agent import copywriter
from core.copy_models import (
    BusinessClassificationInput,
    CopyModel,
    MarketingCopyInput,
    PlanInterval,
    ServiceDescriptionInput,
)
from utils.error_utils import PROVIDER_ERRORS

app = FastAPI(title="Pagina Local Copywriter")

# CORS for the dashboard / server actions
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # dev: permissive
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request bodies (camelCase on the wire)
# ---------------------------------------------------------------------------
class ServiceSeoRequest(CopyModel):
    store: MarketingCopyInput
    service_name: str
    service_description: Optional[str] = None


class ProductSeoRequest(CopyModel):
    store: MarketingCopyInput
    product_name: str
    product_description: Optional[str] = None
    price_in_cents: Optional[int] = None


class CollectionSeoRequest(CopyModel):
    store: MarketingCopyInput
    collection_name: str
    collection_description: Optional[str] = None


class PricingPlanSeoRequest(CopyModel):
    store: MarketingCopyInput
    plan_name: str
    plan_description: Optional[str] = None
    price_in_cents: Optional[int] = None
    interval: Optional[PlanInterval] = None


async def _provider_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # No partial results: the whole request fails.
    logger.error("Provider error on {}: {}", request.url.path, exc)
    return JSONResponse(
        status_code=502,
        content={"detail": f"AI provider error: {type(exc).__name__}"},
    )


for _error_type in PROVIDER_ERRORS:
    app.add_exception_handler(_error_type, _provider_error_handler)


@app.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok", "provider": copywriter.get_active_provider()}


@app.post("/marketing-copy")
async def marketing_copy(req: MarketingCopyInput) -> Dict[str, Any]:
    logger.info("Marketing copy requested for {!r} ({})", req.business_name, req.city)
    copy = await copywriter.generate_marketing_copy(req)
    return copy.model_dump(by_alias=True)


@app.post("/service-descriptions")
async def service_descriptions(req: ServiceDescriptionInput) -> List[Dict[str, Any]]:
    services = await copywriter.generate_service_descriptions(req)
    return [service.model_dump(by_alias=True) for service in services]


@app.post("/classify-category")
async def classify_category(req: BusinessClassificationInput) -> Dict[str, Any]:
    category = await copywriter.classify_business_category(req)
    return {"category": category}


@app.post("/service-seo")
async def service_seo(req: ServiceSeoRequest) -> Dict[str, Any]:
    seo = await copywriter.generate_service_seo(req.store, req.service_name, req.service_description)
    return seo.model_dump(by_alias=True)


@app.post("/institutional-pages")
async def institutional_pages(req: MarketingCopyInput) -> Dict[str, Any]:
    pages = await copywriter.generate_institutional_pages(req)
    return pages.model_dump(by_alias=True)


@app.post("/product-seo")
async def product_seo(req: ProductSeoRequest) -> Dict[str, Any]:
    seo = await copywriter.generate_product_seo(
        req.store, req.product_name, req.product_description, req.price_in_cents
    )
    return seo.model_dump(by_alias=True)


@app.post("/collection-seo")
async def collection_seo(req: CollectionSeoRequest) -> Dict[str, Any]:
    seo = await copywriter.generate_collection_seo(
        req.store, req.collection_name, req.collection_description
    )
    return seo.model_dump(by_alias=True)


@app.post("/pricing-plan-seo")
async def pricing_plan_seo(req: PricingPlanSeoRequest) -> Dict[str, Any]:
    seo = await copywriter.generate_pricing_plan_seo(
        req.store, req.plan_name, req.plan_description, req.price_in_cents, req.interval
    )
    return seo.model_dump(by_alias=True)
