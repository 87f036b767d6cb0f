"""Prompt builders for catalog entries: products, collections and pricing plans."""
from typing import Optional

from core.copy_models import MarketingCopyInput, PlanInterval
from core.prompts import ABOUT_CHARS, clean_prompt_text, get_anti_ai_rules, strip_code_fences
from utils.text_utils import format_price_brl

INTERVAL_LABELS = {
    PlanInterval.MONTHLY: "por mês",
    PlanInterval.YEARLY: "por ano",
    PlanInterval.ONE_TIME: "",
}


def _owner_line(description: Optional[str]) -> str:
    text = clean_prompt_text(description, ABOUT_CHARS)
    return f'Descrição fornecida pelo dono: "{text}"\n' if text else ""


def plan_price_text(price_in_cents: Optional[int], interval: Optional[PlanInterval]) -> str:
    price = format_price_brl(price_in_cents)
    if not price:
        return ""
    label = INTERVAL_LABELS.get(interval, "") if interval else ""
    return f"{price} {label}".strip()


def get_product_seo_prompt(
    store: MarketingCopyInput,
    product_name: str,
    product_description: Optional[str] = None,
    price_in_cents: Optional[int] = None,
) -> str:
    store = strip_code_fences(store)
    product_name = strip_code_fences(product_name)
    price = format_price_brl(price_in_cents)
    price_line = f"Preço: {price}\n" if price else ""
    price_clause = f" custa {price}" if price else ""
    return f"""Você é especialista em SEO para e-commerce local brasileiro.

Produto: "{product_name}"
{_owner_line(product_description)}{price_line}Loja: "{store.business_name}"
Categoria: "{store.category}"
Cidade: "{store.city}, {store.state}"

Objetivo: ranquear nas buscas abaixo e aparecer em respostas de IA:
- "{product_name} em {store.city}"
- "{product_name} perto de mim"
- "comprar {product_name} {store.city}"

Se houver "Descrição fornecida pelo dono", use-a como BASE. NÃO copie literalmente.

{get_anti_ai_rules()}

Para CADA campo:

- "description": o que o CLIENTE ganha com este produto (60-100 caracteres).
  BOM: "Ração para cães adultos de grande porte com alta proteína"
  RUIM: "Produto de qualidade com excelência no atendimento"

- "seoTitle": "{product_name} em {store.city} | {store.business_name}" (máx 60 caracteres)

- "seoDescription": produto + preço (se houver) + cidade + chamada para ação (máx 155 caracteres)

- "longDescription": 4 parágrafos (700-1000 caracteres no total), separados por \\n
  * Parágrafo 1: o que é o produto e para quem serve. Comece com "{product_name} é..." e inclua "{product_name} em {store.city}".
  * Parágrafo 2: detalhes práticos e o que está incluso. Mencione "{store.business_name}".
  * Parágrafo 3: "{product_name} perto de mim em {store.city}{price_clause}. Disponível na {store.business_name} em {store.city}, {store.state}." Complete com 2-3 frases sobre como comprar.
  * Parágrafo 4: "Para comprar {product_name} em {store.city}, fale com a {store.business_name} pelo WhatsApp."

### RETORNE APENAS ESTE JSON:
{{
  "description": "...",
  "seoTitle": "...",
  "seoDescription": "...",
  "longDescription": "..."
}}

RETORNE APENAS O JSON, SEM MARKDOWN."""


def get_collection_seo_prompt(
    store: MarketingCopyInput,
    collection_name: str,
    collection_description: Optional[str] = None,
) -> str:
    store = strip_code_fences(store)
    collection_name = strip_code_fences(collection_name)
    lower_name = collection_name.lower()
    return f"""Você é especialista em SEO para e-commerce local brasileiro.

Coleção: "{collection_name}"
{_owner_line(collection_description)}Loja: "{store.business_name}"
Categoria do negócio: "{store.category}"
Cidade: "{store.city}, {store.state}"

Objetivo: ranquear para:
- "{collection_name} em {store.city}"
- "{collection_name} {store.category} {store.city}"
- "{collection_name} perto de mim"

{get_anti_ai_rules()}

Para CADA campo:

- "description": descrição curta da coleção (60-100 caracteres)
  BOM: "Camisetas masculinas de algodão e dry-fit para o dia a dia e treino"
  RUIM: "Nossa coleção exclusiva com produtos diferenciados"

- "seoTitle": "{collection_name} em {store.city} | {store.business_name}" (máx 60 caracteres)

- "seoDescription": coleção + produtos + cidade + chamada para ação (máx 155 caracteres)

- "longDescription": 4 parágrafos (800-1100 caracteres no total), separados por \\n
  * Parágrafo 1: o que é a coleção, quais produtos inclui e para quem é. Inclua "{collection_name} em {store.city}".
  * Parágrafo 2: por que comprar {lower_name} na {store.business_name}: variedade, atendimento, detalhes práticos.
  * Parágrafo 3: "Para encontrar {lower_name} perto de mim em {store.city}, a {store.business_name} é a opção da região." Complete com diferenciais concretos.
  * Parágrafo 4: "Fale com a {store.business_name} pelo WhatsApp para ver os produtos de {lower_name} disponíveis em {store.city}."

### RETORNE APENAS ESTE JSON:
{{
  "description": "...",
  "seoTitle": "...",
  "seoDescription": "...",
  "longDescription": "..."
}}

RETORNE APENAS O JSON, SEM MARKDOWN."""


def get_pricing_plan_seo_prompt(
    store: MarketingCopyInput,
    plan_name: str,
    plan_description: Optional[str] = None,
    price_in_cents: Optional[int] = None,
    interval: Optional[PlanInterval] = None,
) -> str:
    store = strip_code_fences(store)
    plan_name = strip_code_fences(plan_name)
    price = plan_price_text(price_in_cents, interval)
    price_line = f"Preço: {price}\n" if price else ""
    price_clause = f", por {price}" if price else ""
    return f"""Você é especialista em SEO para negócios locais brasileiros.

Plano: "{plan_name}"
{_owner_line(plan_description)}{price_line}Empresa: "{store.business_name}"
Categoria: "{store.category}"
Cidade: "{store.city}, {store.state}"

Objetivo: página de planos que ranqueia para:
- "planos {store.category.lower()} {store.city}"
- "{plan_name} {store.business_name}"

{get_anti_ai_rules()}

Para CADA campo:

- "description": descrição curta do plano (60-120 caracteres) focada no benefício principal.
  BOM: "Acesso à musculação, funcional e aulas coletivas de segunda a sábado"
  RUIM: "Plano premium com atendimento diferenciado"

- "longDescription": 3 parágrafos (500-800 caracteres no total), separados por \\n
  * Parágrafo 1: o que inclui o plano "{plan_name}"{price_clause} e para quem é indicado.
  * Parágrafo 2: o que o cliente ganha na prática com o plano na {store.business_name} em {store.city}.
  * Parágrafo 3: "Para contratar o plano {plan_name} da {store.business_name} em {store.city}, fale pelo WhatsApp."

### RETORNE APENAS ESTE JSON:
{{
  "description": "...",
  "longDescription": "..."
}}

RETORNE APENAS O JSON, SEM MARKDOWN."""
