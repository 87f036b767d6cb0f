"""
Deterministic, non-LLM content for every field the model left empty.

Fallbacks are gap fillers: each step checks its field first and never
overwrites something the model already produced, so applying them twice
changes nothing.
"""
import re
from typing import List, Optional

from loguru import logger

from core.copy_models import (
    CollectionSeo,
    FAQItem,
    InstitutionalPageContent,
    InstitutionalPages,
    MarketingCopy,
    MarketingCopyInput,
    PricingPlanSeo,
    ProductSeo,
    ServiceItem,
    ServiceSeo,
)
from utils.text_utils import clean_html_to_text, format_price_brl, slugify, strip_diacritics

# ---------------------------------------------------------------------------
# Brand name
# ---------------------------------------------------------------------------

_DASH_RUN_RE = re.compile(r"[—–-]{2,}")
_SEPARATOR_RE = re.compile(r"[|/\\]")
_HAS_ALNUM_RE = re.compile(r"\w")

BRAND_MAX_WORDS = 3


def extract_brand_name(full_name: str, category: str) -> str:
    """
    Short display name from a full listing name.

    "Borracharia Salmo 23 Ltda" / "Borracharia" -> "Salmo 23 Ltda"

    Separator runs become spaces, words already in the category and repeated
    words are dropped, and at most three words are kept. When nothing
    survives, the first two words of the full name are used.
    """
    category_words = set(category.lower().split())

    cleaned = _DASH_RUN_RE.sub(" ", full_name)
    cleaned = _SEPARATOR_RE.sub(" ", cleaned)

    seen = set()
    unique: List[str] = []
    for word in cleaned.split():
        lower = word.lower()
        if lower in seen or lower in category_words or not _HAS_ALNUM_RE.search(word):
            continue
        seen.add(lower)
        unique.append(word)

    if not unique:
        return " ".join(full_name.split()[:2])

    return " ".join(unique[:BRAND_MAX_WORDS])


# ---------------------------------------------------------------------------
# Slug
# ---------------------------------------------------------------------------

SLUG_STOP_WORDS = frozenset(
    {
        # corporate suffixes
        "ltda", "me", "eireli", "sa", "epp", "mei", "cia",
        # generic marketing words
        "movel", "24h", "24horas", "express", "rapido", "delivery", "online",
        # prepositions and articles
        "de", "do", "da", "dos", "das", "e", "em", "para", "com",
        "no", "na", "nos", "nas", "os", "as",
    }
)

NAME_SLUG_MAX_WORDS = 4
NAME_SLUG_MAX_CHARS = 35
CITY_SLUG_MAX_CHARS = 20
SLUG_MAX_CHARS = 60
EMPTY_SLUG = "loja"


def _essential_words(name: str) -> List[str]:
    normalized = strip_diacritics(name.lower())

    seen = set()
    essential: List[str] = []
    for word in normalized.split():
        clean = re.sub(r"[^a-z0-9]", "", word)
        if len(clean) < 2 or clean in SLUG_STOP_WORDS or clean in seen:
            continue
        seen.add(clean)
        essential.append(clean)
        if len(essential) >= NAME_SLUG_MAX_WORDS:
            break

    return essential


def generate_optimized_slug(category: str, brand_name: str, city: str) -> str:
    """
    "{name}-{city}" subdomain slug: lowercase ASCII, single hyphens, at most
    60 characters. `category` is accepted for call-site symmetry; category
    words are already gone from the brand name.
    """
    name_slug = "-".join(_essential_words(brand_name))[:NAME_SLUG_MAX_CHARS].strip("-")
    city_slug = slugify(city, CITY_SLUG_MAX_CHARS)

    slug = "-".join(part for part in (name_slug, city_slug) if part)
    slug = re.sub(r"-+", "-", slug)[:SLUG_MAX_CHARS].strip("-")
    return slug or EMPTY_SLUG


# ---------------------------------------------------------------------------
# Services and FAQ
# ---------------------------------------------------------------------------

# (name, description) per normalized category.
CATEGORY_SERVICES = {
    "borracharia": [
        ("Troca de Pneus", "Montagem e desmontagem de pneus de todos os aros na hora"),
        ("Alinhamento", "Alinhamento computadorizado para o carro não puxar e o pneu durar mais"),
        ("Balanceamento", "Balanceamento de rodas para acabar com a vibração no volante"),
        ("Reparo de Pneus", "Conserto de pneu furado com macarrão ou manchão sem trocar o pneu"),
    ],
    "barbearia": [
        ("Corte de Cabelo", "Corte masculino na tesoura ou na máquina do jeito que você pedir"),
        ("Barba", "Barba aparada e desenhada na navalha com toalha quente"),
        ("Corte e Barba", "Corte e barba no mesmo horário com preço de combo"),
        ("Degradê", "Degradê com acabamento na navalha"),
    ],
    "academia": [
        ("Musculação", "Treino de musculação com acompanhamento de professor no salão"),
        ("Funcional", "Treino funcional em grupo para condicionamento e perda de peso"),
        ("Avaliação Física", "Avaliação corporal para montar o treino certo para você"),
        ("Personal Trainer", "Treino individual com personal para acelerar o resultado"),
    ],
    "restaurante": [
        ("Almoço Executivo", "Prato do dia com arroz, feijão, salada e proteína a preço fixo"),
        ("Self-Service", "Buffet por quilo com pratos quentes e saladas variadas"),
        ("Delivery", "Entrega pelo WhatsApp ou aplicativo com o cardápio completo"),
        ("Marmitex", "Marmita completa para levar em embalagem térmica"),
    ],
    "oficina mecanica": [
        ("Troca de Óleo", "Troca de óleo e filtro com marcas homologadas pela montadora"),
        ("Revisão Completa", "Revisão geral do veículo com relatório de cada item verificado"),
        ("Freios", "Troca de pastilhas e discos e regulagem do sistema de freios"),
        ("Suspensão", "Troca de amortecedores, molas e bandejas"),
    ],
    "pet shop": [
        ("Banho e Tosa", "Banho com produto adequado ao pelo e tosa higiênica ou na máquina"),
        ("Consulta Veterinária", "Consulta para check-up, vacinas e tratamentos"),
        ("Ração e Acessórios", "Rações, brinquedos, coleiras e acessórios para cães e gatos"),
        ("Vacinação", "Vacinas com carteirinha atualizada e orientação veterinária"),
    ],
}


def _category_key(category: str) -> str:
    return " ".join(strip_diacritics(category.lower()).split())


def generate_fallback_services(category: str) -> List[ServiceItem]:
    """Four services: a fixed catalog for known categories, otherwise a generic list."""
    specific = CATEGORY_SERVICES.get(_category_key(category))
    if specific:
        return [ServiceItem(name=name, description=description) for name, description in specific]

    lower = category.lower()
    return [
        ServiceItem(
            name="Atendimento Especializado",
            description=f"Serviço profissional de {lower} com equipe treinada",
        ),
        ServiceItem(
            name="Orçamento Gratuito",
            description="Avaliação sem compromisso pelo WhatsApp ou no local",
        ),
        ServiceItem(
            name="Atendimento Rápido",
            description="Resposta rápida pelo WhatsApp para tirar dúvidas e agendar",
        ),
        ServiceItem(
            name="Garantia do Serviço",
            description="Serviço com garantia e acompanhamento depois da entrega",
        ),
    ]


def generate_fallback_faq(brand_name: str, city: str, category: str) -> List[FAQItem]:
    lower = category.lower()
    return [
        FAQItem(
            question=f"Qual a melhor {lower} perto de mim em {city}?",
            answer=(
                f"A {brand_name} é {lower} em {city} com atendimento profissional e avaliações "
                f"de clientes da região. Fale pelo WhatsApp para saber mais."
            ),
        ),
        FAQItem(
            question=f"Onde fica a {brand_name} em {city}?",
            answer=(
                f"A {brand_name} fica em {city} e atende a cidade e a região. "
                f"O endereço completo e o mapa estão nesta página."
            ),
        ),
        FAQItem(
            question=f"Quanto custa {lower} em {city}?",
            answer=(
                f"O preço depende do serviço. A {brand_name} passa orçamento sem compromisso "
                f"pelo WhatsApp: mande uma mensagem com o que você precisa."
            ),
        ),
        FAQItem(
            question=f"Quais formas de pagamento a {brand_name} aceita?",
            answer=(
                "As formas de pagamento aceitas e as condições de parcelamento podem ser "
                "confirmadas pelo WhatsApp antes do atendimento."
            ),
        ),
    ]


def default_neighborhoods(city: str) -> List[str]:
    return [f"Centro de {city}", "Região Central", "Zona Norte", "Zona Sul", "Região Metropolitana"]


def fallback_service_long_description(
    service_name: str,
    brand_name: str,
    category: str,
    city: str,
    state: str,
) -> str:
    service = service_name.lower()
    return "\n".join(
        [
            f"{service_name} em {city}: a {brand_name} é {category.lower()} em {city}, {state}, "
            f"e faz {service} com profissionais experientes.",
            f"Na {brand_name}, {service} é feito com os equipamentos certos e atenção aos detalhes, "
            f"para você resolver de uma vez.",
            f"Atendemos clientes de {city} e da região. Se você procura {service} perto de mim, "
            f"fale com a gente pelo WhatsApp para tirar dúvidas e marcar um horário.",
            f"Peça seu orçamento de {service} pelo WhatsApp, sem compromisso.",
        ]
    )


def _fill_service(service: ServiceItem, brand_name: str, data: MarketingCopyInput) -> None:
    if not service.seo_title:
        service.seo_title = f"{service.name} em {data.city} | {brand_name}"
    if not service.seo_description:
        service.seo_description = (
            f"{service.name} na {brand_name}, {data.category.lower()} em {data.city}. "
            f"{service.description} Fale pelo WhatsApp!"
        ).replace("  ", " ")
    if not service.long_description:
        service.long_description = fallback_service_long_description(
            service.name, brand_name, data.category, data.city, data.state
        )


# ---------------------------------------------------------------------------
# Marketing copy
# ---------------------------------------------------------------------------

def apply_fallbacks(copy: MarketingCopy, data: MarketingCopyInput) -> MarketingCopy:
    """
    Fill every empty field of `copy` in place and return it.

    Order matters: the slug, FAQ and SEO fields are built from the brand
    name, so it is resolved first.
    """
    filled: List[str] = []

    if not copy.brand_name:
        copy.brand_name = extract_brand_name(data.business_name, data.category)
        filled.append("brand_name")
    if not copy.slug:
        copy.slug = generate_optimized_slug(data.category, copy.brand_name, data.city)
        filled.append("slug")
    if not copy.services:
        copy.services = generate_fallback_services(data.category)
        filled.append("services")
    for service in copy.services:
        _fill_service(service, copy.brand_name, data)
    if not copy.faq:
        copy.faq = generate_fallback_faq(copy.brand_name, data.city, data.category)
        filled.append("faq")
    if not copy.neighborhoods:
        copy.neighborhoods = default_neighborhoods(data.city)
        filled.append("neighborhoods")
    if not copy.seo_title:
        copy.seo_title = f"{data.category} em {data.city} | {copy.brand_name}"
        filled.append("seo_title")
    if not copy.seo_description:
        copy.seo_description = (
            f"{data.category} em {data.city}. {copy.brand_name} atende pelo WhatsApp. "
            f"Veja avaliações, endereço e fale com a gente!"
        )
        filled.append("seo_description")
    if not copy.hero_title:
        copy.hero_title = f"{data.category} em {data.city} – {copy.brand_name}"
        filled.append("hero_title")
    if not copy.hero_subtitle:
        copy.hero_subtitle = (
            f"{data.category} em {data.city}, {data.state}. Orçamento e atendimento pelo WhatsApp."
        )
        filled.append("hero_subtitle")
    if not copy.about_section:
        copy.about_section = (
            f"{copy.brand_name} é {data.category.lower()} em {data.city}, {data.state}. "
            f"Atende clientes da cidade e da região com orçamento pelo WhatsApp."
        )
        filled.append("about_section")

    if filled:
        logger.warning("Fallback content used for: {}", ", ".join(filled))

    return copy


# ---------------------------------------------------------------------------
# Institutional pages
# ---------------------------------------------------------------------------

def generate_fallback_institutional_pages(data: MarketingCopyInput) -> InstitutionalPages:
    name = data.business_name
    lower = data.category.lower()

    about_paragraphs = [
        f"A {name} é {lower} em {data.city}, {data.state}.",
        f"Atendemos clientes de {data.city} e da região com atenção a cada pedido.",
    ]
    google_about = clean_html_to_text(data.google_about)
    if google_about:
        about_paragraphs.insert(1, google_about)
    about_paragraphs.append(f"Fale com a {name} pelo WhatsApp para tirar dúvidas ou pedir um orçamento.")

    contact_paragraphs = [f"Fale com a {name} pelo WhatsApp ou pelo telefone informado nesta página."]
    if data.address:
        contact_paragraphs.append(f"Endereço: {data.address}.")
    if data.opening_hours:
        hours = "; ".join(f"{day}: {span}" for day, span in data.opening_hours.items())
        contact_paragraphs.append(f"Horário de funcionamento: {hours}.")
    contact_paragraphs.append(f"Atendemos {data.city} e região.")

    return InstitutionalPages(
        about=InstitutionalPageContent(
            title=f"Sobre a {name}",
            content="\n".join(about_paragraphs),
            seo_title=f"Sobre a {name} | {data.category} em {data.city}",
            seo_description=f"Conheça a {name}, {lower} em {data.city}, {data.state}. Fale pelo WhatsApp.",
        ),
        contact=InstitutionalPageContent(
            title=f"Contato – {name}",
            content="\n".join(contact_paragraphs),
            seo_title=f"Contato {name} em {data.city}",
            seo_description=f"Entre em contato com a {name} em {data.city}: WhatsApp, telefone e endereço.",
        ),
    )


def apply_institutional_fallbacks(pages: InstitutionalPages, data: MarketingCopyInput) -> InstitutionalPages:
    defaults = generate_fallback_institutional_pages(data)
    for page_name in ("about", "contact"):
        page = getattr(pages, page_name)
        default_page = getattr(defaults, page_name)
        for field in InstitutionalPageContent.model_fields:
            if not getattr(page, field):
                setattr(page, field, getattr(default_page, field))
    return pages


# ---------------------------------------------------------------------------
# Single service and catalog SEO
# ---------------------------------------------------------------------------

def fill_service_seo(
    seo: ServiceSeo,
    data: MarketingCopyInput,
    service_name: str,
    service_description: Optional[str] = None,
) -> ServiceSeo:
    item = ServiceItem(
        name=service_name,
        description=service_description or "",
        seo_title=seo.seo_title or None,
        seo_description=seo.seo_description or None,
        long_description=seo.long_description or None,
    )
    _fill_service(item, data.business_name, data)
    seo.seo_title = item.seo_title or ""
    seo.seo_description = item.seo_description or ""
    seo.long_description = item.long_description or ""
    return seo


def fill_catalog_seo(
    seo: ProductSeo,
    store: MarketingCopyInput,
    name: str,
    description: Optional[str] = None,
    price_in_cents: Optional[int] = None,
) -> ProductSeo:
    """Gap-fill product or collection SEO."""
    kind = "coleção" if isinstance(seo, CollectionSeo) else "produto"
    price = format_price_brl(price_in_cents)
    price_part = f" por {price}" if price else ""

    if not seo.description:
        seo.description = description or f"{name} na {store.business_name} em {store.city}"
    if not seo.seo_title:
        seo.seo_title = f"{name} em {store.city} | {store.business_name}"
    if not seo.seo_description:
        seo.seo_description = (
            f"{name}{price_part} em {store.city}. {store.business_name}, "
            f"{store.category.lower()}. Peça pelo WhatsApp!"
        )
    if not seo.long_description:
        seo.long_description = "\n".join(
            [
                f"{name} em {store.city}: {kind} disponível na {store.business_name}, "
                f"{store.category.lower()} em {store.city}, {store.state}.",
                seo.description,
                f"Procurando {name.lower()} perto de mim em {store.city}? "
                f"A {store.business_name} atende a cidade e a região{price_part and ','}{price_part}.",
                f"Para comprar {name.lower()} em {store.city}, fale com a {store.business_name} pelo WhatsApp.",
            ]
        )
    return seo


def fill_pricing_plan_seo(
    seo: PricingPlanSeo,
    store: MarketingCopyInput,
    plan_name: str,
    description: Optional[str] = None,
    price_text: str = "",
) -> PricingPlanSeo:
    if not seo.description:
        seo.description = description or f"Plano {plan_name} da {store.business_name} em {store.city}"
    if not seo.long_description:
        price_part = f", por {price_text}" if price_text else ""
        seo.long_description = "\n".join(
            [
                f"O plano {plan_name} da {store.business_name}{price_part} é para quem quer "
                f"{store.category.lower()} em {store.city} com regularidade.",
                seo.description,
                f"Para contratar o plano {plan_name} da {store.business_name} em {store.city}, "
                f"fale pelo WhatsApp.",
            ]
        )
    return seo


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------

GOOGLE_TYPE_PT_BR = {
    "accounting": "Contabilidade",
    "bakery": "Padaria",
    "barber_shop": "Barbearia",
    "beauty_salon": "Salão de Beleza",
    "cafe": "Cafeteria",
    "car_dealer": "Revendedora de Veículos",
    "car_repair": "Oficina Mecânica",
    "car_wash": "Lava Rápido",
    "dentist": "Clínica Odontológica",
    "electrician": "Eletricista",
    "florist": "Floricultura",
    "gym": "Academia",
    "hair_salon": "Salão de Beleza",
    "laundry": "Lavanderia",
    "lawyer": "Advogado",
    "locksmith": "Chaveiro",
    "moving_company": "Mudanças",
    "painter": "Pintor",
    "pet_store": "Pet Shop",
    "pharmacy": "Farmácia",
    "physiotherapist": "Fisioterapia",
    "plumber": "Encanador",
    "real_estate_agency": "Imobiliária",
    "restaurant": "Restaurante",
    "tire_shop": "Borracharia",
    "veterinary_care": "Clínica Veterinária",
}

CATEGORY_MAX_CHARS = 50
CATEGORY_MAX_WORDS = 4


def category_from_place_type(primary_type: Optional[str]) -> Optional[str]:
    if not primary_type:
        return None
    return GOOGLE_TYPE_PT_BR.get(primary_type.strip().lower())


def normalize_category_name(raw: Optional[str]) -> Optional[str]:
    """Tidy a model-proposed category; None when it does not look like one."""
    if not raw:
        return None
    name = " ".join(raw.strip().strip("\"'.").split())
    if not name or len(name) > CATEGORY_MAX_CHARS or len(name.split()) > CATEGORY_MAX_WORDS:
        return None
    return name[0].upper() + name[1:]
