import pytest

from core.copy_models import (
    BusinessClassificationInput,
    MarketingCopyInput,
    PlaceReview,
    PlanInterval,
    ServiceDescriptionInput,
)
from core.prompts import (
    BANNED_WORDS,
    get_anti_ai_rules,
    get_category_classification_prompt,
    get_faq_prompt,
    get_institutional_pages_prompt,
    get_service_description_prompt,
    get_service_names_prompt,
    get_service_seo_prompt,
    get_services_prompt,
    get_store_content_prompt,
    strip_code_fences,
)
from core.prompts_catalog import (
    get_collection_seo_prompt,
    get_pricing_plan_seo_prompt,
    get_product_seo_prompt,
    plan_price_text,
)


def _store_prompts(data):
    return {
        "store_content": get_store_content_prompt(data),
        "faq": get_faq_prompt(data),
        "service_names": get_service_names_prompt(data),
        "services": get_services_prompt(data, ["Troca de Pneus", "Alinhamento"]),
        "service_seo": get_service_seo_prompt(data, "Alinhamento", "<p>Alinhamento 3D</p>"),
        "institutional": get_institutional_pages_prompt(data),
        "product": get_product_seo_prompt(data, "Pneu Aro 14", "Pneu novo", 35990),
        "collection": get_collection_seo_prompt(data, "Pneus Remold"),
        "plan": get_pricing_plan_seo_prompt(data, "Mensal", None, 9990, PlanInterval.MONTHLY),
    }


@pytest.mark.parametrize("rich", [False, True])
def test_no_prompt_contains_a_code_fence(rich, store_input, rich_store_input):
    data = rich_store_input if rich else store_input
    prompts = _store_prompts(data)
    prompts["service_description"] = get_service_description_prompt(
        ServiceDescriptionInput(business_name="Salmo 23", category="Borracharia", existing_services=["Rodízio"])
    )
    prompts["classification"] = get_category_classification_prompt(
        BusinessClassificationInput(business_name="Salmo 23", primary_type="car_repair")
    )
    for name, prompt in prompts.items():
        assert "```" not in prompt, name
        assert "JSON" in prompt, name


def test_copy_prompts_carry_the_anti_generic_rules(store_input):
    rules = get_anti_ai_rules()
    for name, prompt in _store_prompts(store_input).items():
        if name == "service_names":
            continue
        assert rules in prompt, name
    for word in BANNED_WORDS:
        assert word in rules


def test_optional_facts_only_render_when_present(store_input, rich_store_input):
    bare = get_store_content_prompt(store_input)
    assert "Avaliação Google" not in bare
    assert "Endereço" not in bare
    assert "O QUE OS CLIENTES DIZEM" not in bare

    rich = get_store_content_prompt(rich_store_input)
    assert "Avaliação Google: 4.8 estrelas" in rich
    assert "Total de avaliações: 312" in rich
    assert "Endereço: Rua Sete de Setembro, 100 - Centro" in rich
    assert "Aceita Pix, Estacionamento" in rich
    assert "Sábado: 08:00-14:00" in rich
    assert "Corte rápido, barba bem feita" in rich


def test_google_about_is_cleaned_of_html(rich_store_input):
    prompt = get_faq_prompt(rich_store_input)
    assert "Barbearia tradicional desde 1998" in prompt
    assert "<b>" not in prompt
    assert "track()" not in prompt


def test_services_prompt_lists_the_batch(store_input):
    prompt = get_services_prompt(store_input, ["Troca de Pneus", "Alinhamento", "Balanceamento"])
    assert '- "Troca de Pneus"\n- "Alinhamento"\n- "Balanceamento"' in prompt
    assert "Guarulhos | Borracharia Salmo 23 Ltda" in prompt


def test_service_description_prompt_lists_existing_services():
    data = ServiceDescriptionInput(
        business_name="Salmo 23", category="Borracharia", existing_services=["Rodízio", "Calibragem"]
    )
    assert "Rodízio, Calibragem" in get_service_description_prompt(data)
    assert "Evite repetir" not in get_service_description_prompt(
        ServiceDescriptionInput(business_name="Salmo 23", category="Borracharia")
    )


def test_classification_prompt_uses_reviews_and_place_type():
    data = BusinessClassificationInput(
        business_name="Salmo 23",
        primary_type="car_repair",
        reviews=[PlaceReview(rating=5, text="Trocaram meu pneu em 10 minutos"), PlaceReview(rating=4)],
    )
    prompt = get_category_classification_prompt(data)
    assert "car_repair" in prompt
    assert "(5★) Trocaram meu pneu em 10 minutos" in prompt

    empty = get_category_classification_prompt(BusinessClassificationInput(business_name="Salmo 23"))
    assert "não informado" in empty
    assert "(sem avaliações)" in empty


def test_catalog_prompts_render_brazilian_prices(store_input):
    assert "Preço: R$ 359,90" in get_product_seo_prompt(store_input, "Pneu Aro 14", price_in_cents=35990)
    assert "Preço:" not in get_product_seo_prompt(store_input, "Pneu Aro 14")
    assert "Preço: R$ 99,90 por mês" in get_pricing_plan_seo_prompt(
        store_input, "Mensal", price_in_cents=9990, interval=PlanInterval.MONTHLY
    )


def test_plan_price_text():
    assert plan_price_text(2990, PlanInterval.YEARLY) == "R$ 29,90 por ano"
    assert plan_price_text(2990, PlanInterval.ONE_TIME) == "R$ 29,90"
    assert plan_price_text(2990, None) == "R$ 29,90"
    assert plan_price_text(None, PlanInterval.MONTHLY) == ""


def test_fences_in_listing_text_never_reach_the_prompt():
    data = MarketingCopyInput(
        business_name="Loja ```json X",
        category="Pet ```",
        city="Guarulhos",
        state="SP",
        google_about="<p>Sobre ```json {}``` fim &#96;&#96;&#96;</p>",
        review_highlights="bom ``` demais",
        address="Rua ```` 10",
        business_attributes=["Pix ```"],
        opening_hours={"Sábado```": "08:00-14:00"},
    )
    prompts = _store_prompts(data)
    prompts["fenced_service"] = get_services_prompt(data, ["Banho ```python"])
    prompts["fenced_service_seo"] = get_service_seo_prompt(data, "Tosa ```", "Tosa ``` completa")
    prompts["fenced_product"] = get_product_seo_prompt(data, "Ração ```", "```Premium```", 35990)
    prompts["fenced_collection"] = get_collection_seo_prompt(data, "Brinquedos ```")
    prompts["fenced_plan"] = get_pricing_plan_seo_prompt(data, "Mensal ```", None, 9990, PlanInterval.MONTHLY)
    prompts["service_description"] = get_service_description_prompt(
        ServiceDescriptionInput(business_name="Pet ```", category="Pet Shop", existing_services=["Banho ```"])
    )
    prompts["classification"] = get_category_classification_prompt(
        BusinessClassificationInput(business_name="Pet ```", reviews=[PlaceReview(rating=5, text="ótimo ``` banho")])
    )

    for name, prompt in prompts.items():
        assert "```" not in prompt, name
    assert '- Nome: "Loja json X"' in prompts["store_content"]
    assert "bom demais" in prompts["faq"]


def test_strip_code_fences_keeps_short_backtick_runs_and_input_untouched():
    data = MarketingCopyInput(business_name="A `b` ``c`` ```d", category="Pet", city="Guarulhos", state="SP")

    clean = strip_code_fences(data)

    assert clean.business_name == "A `b` ``c`` d"
    assert data.business_name == "A `b` ``c`` ```d"
    assert strip_code_fences({"k```": ["v```", 3]}) == {"k": ["v", 3]}
