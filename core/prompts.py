"""
Prompt builders for store copy.

Every builder is a pure function of its input. The model is asked for bare
JSON, so the format examples below are plain text: no markdown fences
anywhere in a rendered prompt.
"""
import re
from typing import Any, List, Optional

from pydantic import BaseModel

from core.copy_models import (
    BusinessClassificationInput,
    MarketingCopyInput,
    ServiceDescriptionInput,
)
from utils.text_utils import clean_html_to_text, truncate_text

SYSTEM_PROMPT = (
    "Você é um especialista em Marketing Local e SEO brasileiro. "
    "Sempre retorne JSON válido sem markdown."
)

BANNED_WORDS = [
    "excelência",
    "qualidade incomparável",
    "soluções",
    "inovador",
    "renomado",
    "diferenciado",
    "comprometimento",
    "paixão",
    "expertise",
    "referência",
    "incomparável",
    "premium",
]

BANNED_PHRASES = [
    "no coração de",
    "oferecemos o melhor",
    "atendimento de excelência",
    "qualidade e confiança",
    "tradição e modernidade",
    "muito mais do que",
    "sua satisfação é nossa prioridade",
    "venha conferir",
    "experiência única",
    "não perca tempo",
]

BANNED_OPENERS = [
    "Bem-vindo",
    "Seja bem-vindo",
    "Descubra",
    "Você sabia",
    "Procurando por",
    "Em um mundo",
    "Quando se trata de",
]

REVIEW_CHARS = 1200
ABOUT_CHARS = 800

_FENCE_RE = re.compile(r"`{3,}")


def get_anti_ai_rules() -> str:
    """Fixed block appended to every prompt to keep the copy local and concrete."""
    words = ", ".join(f'"{w}"' for w in BANNED_WORDS)
    phrases = ", ".join(f'"{p}"' for p in BANNED_PHRASES)
    openers = ", ".join(f'"{o}"' for o in BANNED_OPENERS)
    return (
        "### REGRAS DE ESCRITA (OBRIGATÓRIAS):\n"
        f"- PALAVRAS PROIBIDAS: {words}\n"
        f"- FRASES PROIBIDAS: {phrases}\n"
        f"- NUNCA comece um texto com: {openers}\n"
        "- Escreva como o dono do negócio falaria com um vizinho: frases curtas, verbos concretos.\n"
        "- Cite fatos verificáveis (bairro, serviço, horário, forma de pagamento) em vez de adjetivos.\n"
        "- Não invente prêmios, anos de experiência, certificações ou números que não foram informados.\n"
        "- Não use emojis, hashtags nem exclamações em sequência.\n"
        "- Não use blocos de código nem crases na resposta."
    )


def strip_code_fences(value: Any) -> Any:
    """
    Remove runs of three or more backticks from listing text before it is
    interpolated into a prompt. Lists, dicts and input models are walked
    recursively; a model comes back as a sanitized copy.
    """
    if isinstance(value, str):
        return _FENCE_RE.sub("", value)
    if isinstance(value, list):
        return [strip_code_fences(item) for item in value]
    if isinstance(value, dict):
        return {strip_code_fences(k): strip_code_fences(v) for k, v in value.items()}
    if isinstance(value, BaseModel):
        return value.model_copy(
            update={name: strip_code_fences(getattr(value, name)) for name in type(value).model_fields}
        )
    return value


def clean_prompt_text(text: Optional[str], limit: int) -> str:
    # HTML entities can decode into backticks, so fences are stripped after parsing.
    return truncate_text(strip_code_fences(clean_html_to_text(text)), limit) or ""


def _business_facts(data: MarketingCopyInput) -> str:
    """Render the known facts, skipping whatever the listing did not provide."""
    lines = [
        f'- Nome: "{data.business_name}"',
        f'- Categoria: "{data.category}"',
        f'- Cidade: "{data.city}"',
        f'- Estado: "{data.state}"',
    ]
    if data.rating:
        lines.append(f"- Avaliação Google: {data.rating} estrelas")
    if data.review_count:
        lines.append(f"- Total de avaliações: {data.review_count}")
    if data.address:
        lines.append(f"- Endereço: {data.address}")
    if data.google_about:
        lines.append(f'- Descrição do Google: "{clean_prompt_text(data.google_about, ABOUT_CHARS)}"')
    if data.website:
        lines.append(f"- Website: {data.website}")
    if data.price_range:
        lines.append(f"- Faixa de preço: {data.price_range}")
    if data.business_types:
        lines.append(f"- Tipos de negócio (Google): {', '.join(data.business_types)}")
    if data.business_attributes:
        lines.append(f"- Atributos: {', '.join(data.business_attributes)}")
    if data.opening_hours:
        hours = "; ".join(f"{day}: {span}" for day, span in data.opening_hours.items())
        lines.append(f"- Horário de funcionamento: {hours}")

    facts = "### DADOS DO NEGÓCIO:\n" + "\n".join(lines)
    if data.review_highlights:
        facts += "\n\n### O QUE OS CLIENTES DIZEM:\n" + clean_prompt_text(data.review_highlights, REVIEW_CHARS)
    return facts


def get_store_content_prompt(data: MarketingCopyInput) -> str:
    data = strip_code_fences(data)
    return f"""Você escreve a página principal de um negócio local brasileiro.

{_business_facts(data)}

### O QUE GERAR:

1. "brandName": o nome do negócio EXATAMENTE como fornecido: "{data.business_name}".
2. "heroTitle": até 70 caracteres. Formato: "{data.category} em {data.city} – [Nome]".
3. "heroSubtitle": até 140 caracteres dizendo o que o cliente resolve aqui.
4. "aboutSection": 2-3 frases. Comece pelo nome do negócio, cite "{data.category}" e "{data.city}" e diga especificamente o que é oferecido. Use o que os clientes dizem, se houver.
5. "seoTitle": até 60 caracteres. Formato: "{data.category} em {data.city} | [Nome]".
6. "seoDescription": até 155 caracteres, com cidade, categoria e uma chamada para ação concreta (WhatsApp, ligação, visita).
7. "neighborhoods": 5 a 8 bairros REAIS de {data.city}, começando pelos mais conhecidos.

{get_anti_ai_rules()}

Exemplo de aboutSection BOM: "A Borracharia Salmo 23 troca e conserta pneus de carro e moto na Vila Galvão, em Guarulhos. Atende de segunda a sábado e faz socorro na Dutra."
Exemplo RUIM: "Somos referência em excelência, oferecendo soluções completas com qualidade incomparável."

### RETORNE APENAS ESTE JSON:
{{
  "brandName": "{data.business_name}",
  "heroTitle": "...",
  "heroSubtitle": "...",
  "aboutSection": "...",
  "seoTitle": "...",
  "seoDescription": "...",
  "neighborhoods": ["Bairro 1", "Bairro 2", "Bairro 3", "Bairro 4", "Bairro 5"]
}}

RETORNE APENAS O JSON, SEM MARKDOWN."""


def get_faq_prompt(data: MarketingCopyInput) -> str:
    data = strip_code_fences(data)
    return f"""Você escreve o FAQ da página de um negócio local brasileiro.

{_business_facts(data)}

### O QUE GERAR:
8 perguntas que um cliente de {data.city} digitaria no Google ou perguntaria no WhatsApp antes de contratar {data.category.lower()}.
- Use o nome "{data.business_name}" nas perguntas quando soar natural.
- Pelo menos 3 perguntas específicas do segmento "{data.category}" (preço, prazo, garantia, o que levar, como funciona).
- Inclua uma pergunta de localização ("Onde fica...") e uma de formas de pagamento.
- Respostas de 2-3 frases, diretas, começando pela resposta e não pela pergunta repetida.
- Se um dado não foi informado (horário, preço), oriente a confirmar pelo WhatsApp em vez de inventar.

{get_anti_ai_rules()}

### RETORNE APENAS ESTE JSON (array):
[
  {{"question": "Pergunta específica sobre {data.category.lower()} em {data.city}?", "answer": "Resposta direta."}},
  {{"question": "Onde fica a {data.business_name}?", "answer": "Resposta direta."}}
]

RETORNE APENAS O JSON, SEM MARKDOWN."""


def get_service_names_prompt(data: MarketingCopyInput) -> str:
    data = strip_code_fences(data)
    return f"""Liste os 6 serviços mais procurados em "{data.business_name}" ({data.category}) em {data.city}.

{_business_facts(data)}

- Nomes de 2 a 4 palavras, do jeito que o cliente pesquisa no Google.
- Serviços REAIS de {data.category.lower()}, nada genérico como "Atendimento de Qualidade".
- Sem repetir serviços com nomes diferentes.

### RETORNE APENAS ESTE JSON (array de strings):
["Serviço 1", "Serviço 2", "Serviço 3", "Serviço 4", "Serviço 5", "Serviço 6"]

RETORNE APENAS O JSON, SEM MARKDOWN."""


def get_services_prompt(data: MarketingCopyInput, service_names: List[str]) -> str:
    data = strip_code_fences(data)
    service_names = strip_code_fences(service_names)
    names = "\n".join(f'- "{name}"' for name in service_names)
    return f"""Você escreve as páginas de serviço de "{data.business_name}" ({data.category}) em {data.city}, {data.state}.

Serviços desta leva:
{names}

Para CADA serviço, gere:
- "name": exatamente o nome da lista.
- "description": benefício real para o cliente, até 90 caracteres.
- "seoTitle": "[Serviço] em {data.city} | {data.business_name}" (máx 60 caracteres).
- "seoDescription": serviço + cidade + chamada para ação (máx 155 caracteres).
- "longDescription": 4 parágrafos separados por \\n (600-900 caracteres no total):
  * Parágrafo 1: o que é o serviço e quando o cliente precisa dele. Comece com "[Serviço] é..." e inclua "[Serviço] em {data.city}".
  * Parágrafo 2: como a {data.business_name} faz, na prática.
  * Parágrafo 3: "[Serviço] perto de mim em {data.city}": bairros atendidos e como chegar.
  * Parágrafo 4: chamada para ação pelo WhatsApp.

{get_anti_ai_rules()}

### RETORNE APENAS ESTE JSON (array, um objeto por serviço, na mesma ordem):
[
  {{"name": "...", "description": "...", "seoTitle": "...", "seoDescription": "...", "longDescription": "..."}}
]

RETORNE APENAS O JSON, SEM MARKDOWN."""


def get_service_seo_prompt(
    data: MarketingCopyInput,
    service_name: str,
    service_description: Optional[str] = None,
) -> str:
    data = strip_code_fences(data)
    service_name = strip_code_fences(service_name)
    owner_text = clean_prompt_text(service_description, ABOUT_CHARS)
    owner_line = f'Descrição fornecida pelo dono: "{owner_text}"\n' if owner_text else ""
    return f"""Você é especialista em SEO local brasileiro.

Serviço: "{service_name}"
{owner_line}Negócio: "{data.business_name}"
Categoria: "{data.category}"
Cidade: "{data.city}, {data.state}"

Objetivo: ranquear para "{service_name} em {data.city}" e "{service_name} perto de mim".
Se houver descrição do dono, use-a como base sem copiar literalmente.

{get_anti_ai_rules()}

- "seoTitle": "{service_name} em {data.city} | {data.business_name}" (máx 60 caracteres)
- "seoDescription": serviço + cidade + chamada para ação (máx 155 caracteres)
- "longDescription": 4 parágrafos separados por \\n (600-900 caracteres). Comece com "{service_name} é..." e termine com chamada para o WhatsApp.

### RETORNE APENAS ESTE JSON:
{{
  "seoTitle": "...",
  "seoDescription": "...",
  "longDescription": "..."
}}

RETORNE APENAS O JSON, SEM MARKDOWN."""


def get_service_description_prompt(data: ServiceDescriptionInput) -> str:
    data = strip_code_fences(data)
    avoid = ""
    if data.existing_services:
        avoid = f"Evite repetir os serviços que já existem: {', '.join(data.existing_services)}\n"
    return f"""Gere 6 serviços relevantes para "{data.business_name}" ({data.category}).
{avoid}
Cada serviço deve ter:
- "name": nome do serviço (2-4 palavras)
- "description": benefício para o cliente (até 80 caracteres)

{get_anti_ai_rules()}

### RETORNE APENAS ESTE JSON (array):
[
  {{"name": "Serviço", "description": "Benefício para o cliente"}}
]

RETORNE APENAS O JSON, SEM MARKDOWN."""


def get_category_classification_prompt(data: BusinessClassificationInput) -> str:
    data = strip_code_fences(data)
    review_lines = [
        f"- ({review.rating:g}★) {clean_prompt_text(review.text, 200)}"
        for review in data.reviews[:5]
        if review.text
    ]
    reviews = "\n".join(review_lines) if review_lines else "- (sem avaliações)"
    primary = data.primary_type or "não informado"
    return f"""Classifique o negócio abaixo em UMA categoria de negócio local em português do Brasil.

Nome: "{data.business_name}"
Tipo principal no Google: {primary}
Avaliações de clientes:
{reviews}

Regras:
- Use o termo que o cliente brasileiro pesquisa: "Borracharia", "Barbearia", "Pet Shop", "Oficina Mecânica", "Clínica Odontológica".
- No singular, de 1 a 4 palavras, sem cidade e sem o nome do negócio.
- Priorize o que as avaliações descrevem quando o tipo do Google for genérico.

### RETORNE APENAS ESTE JSON:
{{"category": "..."}}

RETORNE APENAS O JSON, SEM MARKDOWN."""


def get_institutional_pages_prompt(data: MarketingCopyInput) -> str:
    data = strip_code_fences(data)
    return f"""Você escreve as páginas institucionais "Sobre nós" e "Contato" de um negócio local brasileiro.

{_business_facts(data)}

### PÁGINA "SOBRE NÓS" (about):
- "title": "Sobre a {data.business_name}"
- "content": 3 a 4 parágrafos separados por \\n (700-1000 caracteres). Quem é o negócio, o que faz em {data.city}, como atende e o que os clientes destacam. Só use fatos fornecidos.
- "seoTitle": "Sobre a {data.business_name} | {data.category} em {data.city}" (máx 60 caracteres)
- "seoDescription": até 155 caracteres.

### PÁGINA "CONTATO" (contact):
- "title": "Contato – {data.business_name}"
- "content": 2 a 3 parágrafos separados por \\n. Como falar com o negócio (WhatsApp, telefone, visita), endereço se informado, horários se informados e regiões de {data.city} atendidas.
- "seoTitle": "Contato {data.business_name} em {data.city}" (máx 60 caracteres)
- "seoDescription": até 155 caracteres com chamada para ação.

{get_anti_ai_rules()}

### RETORNE APENAS ESTE JSON:
{{
  "about": {{"title": "...", "content": "...", "seoTitle": "...", "seoDescription": "..."}},
  "contact": {{"title": "...", "content": "...", "seoTitle": "...", "seoDescription": "..."}}
}}

RETORNE APENAS O JSON, SEM MARKDOWN."""
