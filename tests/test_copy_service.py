import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from fastapi.testclient import TestClient
from google.api_core import exceptions as google_exceptions

import agent.copy_service as copy_service
import agent.copywriter as copywriter
from utils.openai_client import OpenAILLMClient

STORE = {
    "businessName": "Borracharia Salmo 23 Ltda",
    "category": "Borracharia",
    "city": "Guarulhos",
    "state": "SP",
}


@pytest.fixture
def client():
    return TestClient(copy_service.app)


@pytest.fixture
def use_fake(monkeypatch, fake_client_cls):
    def _install(*replies):
        fake = fake_client_cls(list(replies))
        monkeypatch.setattr(copywriter, "_llm_client", fake)
        return fake

    return _install


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
    assert resp.json()["provider"] in {"openai", "gemini"}


def test_marketing_copy_returns_camel_case_with_fallbacks(client, use_fake):
    use_fake()
    resp = client.post("/marketing-copy", json=STORE)

    assert resp.status_code == 200
    body = resp.json()
    assert body["brandName"] == "Salmo 23 Ltda"
    assert body["slug"] == "salmo-23-guarulhos"
    assert body["seoTitle"] == "Borracharia em Guarulhos | Salmo 23 Ltda"
    assert body["services"][0]["longDescription"]
    assert len(body["faq"]) == 4


def test_invalid_payload_is_422(client, use_fake):
    use_fake()
    resp = client.post("/marketing-copy", json={"businessName": "Sem cidade"})
    assert resp.status_code == 422


def test_service_descriptions(client, use_fake):
    use_fake('[{"name": "Rodízio", "description": "Rodízio de pneus"}, {"name": "Socorro 24h"}]')
    resp = client.post(
        "/service-descriptions",
        json={"businessName": "Salmo 23", "category": "Borracharia", "existingServices": ["Rodízio"]},
    )
    assert resp.status_code == 200
    assert [s["name"] for s in resp.json()] == ["Socorro 24h"]


def test_classify_category_falls_back_to_place_type(client, use_fake):
    use_fake("", "")
    resp = client.post(
        "/classify-category",
        json={"businessName": "Salmo 23", "primaryType": "tire_shop", "reviews": [{"rating": 5, "text": "Rápido"}]},
    )
    assert resp.status_code == 200
    assert resp.json() == {"category": "Borracharia"}


def test_service_seo(client, use_fake):
    use_fake('{"seoTitle": "Alinhamento em Guarulhos | Salmo 23"}')
    resp = client.post(
        "/service-seo",
        json={"store": STORE, "serviceName": "Alinhamento", "serviceDescription": "Alinhamento 3D"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["seoTitle"] == "Alinhamento em Guarulhos | Salmo 23"
    assert body["seoDescription"] and body["longDescription"]


def test_institutional_pages(client, use_fake):
    use_fake(json.dumps({"contact": {"title": "Fale com a gente"}}))
    resp = client.post("/institutional-pages", json=STORE)
    assert resp.status_code == 200
    body = resp.json()
    assert body["contact"]["title"] == "Fale com a gente"
    assert body["about"]["seoTitle"] == "Sobre a Borracharia Salmo 23 Ltda | Borracharia em Guarulhos"


def test_catalog_endpoints(client, monkeypatch):
    sdk = MagicMock()
    sdk.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=""))])
    )
    monkeypatch.setattr(copywriter, "_catalog_client", OpenAILLMClient(client=sdk))

    product = client.post("/product-seo", json={"store": STORE, "productName": "Pneu Aro 14", "priceInCents": 35990})
    collection = client.post("/collection-seo", json={"store": STORE, "collectionName": "Pneus Remold"})
    plan = client.post(
        "/pricing-plan-seo",
        json={"store": STORE, "planName": "Mensal", "priceInCents": 9990, "interval": "MONTHLY"},
    )

    assert product.status_code == collection.status_code == plan.status_code == 200
    assert "R$ 359,90" in product.json()["seoDescription"]
    assert collection.json()["seoTitle"] == "Pneus Remold em Guarulhos | Borracharia Salmo 23 Ltda"
    assert "R$ 99,90 por mês" in plan.json()["longDescription"]


def test_pricing_plan_rejects_unknown_interval(client, use_fake):
    use_fake()
    resp = client.post(
        "/pricing-plan-seo",
        json={"store": STORE, "planName": "Mensal", "interval": "WEEKLY"},
    )
    assert resp.status_code == 422


@pytest.mark.parametrize(
    "error",
    [
        openai.RateLimitError(
            "rate limited",
            response=httpx.Response(429, request=httpx.Request("POST", "https://api.openai.com/v1")),
            body=None,
        ),
        google_exceptions.PermissionDenied("API key not valid"),
    ],
)
def test_provider_errors_map_to_502(error, client, use_fake):
    fake = use_fake(error)
    resp = client.post("/marketing-copy", json=STORE)

    assert resp.status_code == 502
    assert type(error).__name__ in resp.json()["detail"]
    assert len(fake.calls) == 1
