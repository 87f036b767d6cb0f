import json
from typing import List

import pytest
from loguru import logger

from core.copy_models import FAQItem, ServiceItem
from utils.json_repair import (
    EXCERPT_CHARS,
    clean_llm_text,
    extract_json_span,
    parse_llm_json,
    repair_truncated_json,
    safe_parse_json,
)

NESTED_DOC = json.dumps(
    {
        "brandName": "Salmo 23",
        "services": [
            {"name": "Troca de Pneus", "price": 49.9, "tags": ["aro 13", "aro 14"]},
            {"name": "Alinhamento", "active": True, "note": None},
        ],
        "faq": [{"question": "Abre sábado?", "answer": "Sim, das 8h às 14h."}],
        "escaped": "aspas \"internas\" e barra \\ e acento é",
        "count": -12,
    },
    ensure_ascii=True,
)

# Raw non-ASCII, a raw U+2028 and a raw \x01 control character, nested four deep,
# with brackets inside string values.
RAW_DOC = json.dumps(
    {
        "store": {
            "brandName": "Café São João",
            "services": [
                {
                    "name": "Troca [aro 14] {kit}",
                    "details": {
                        "notes": ["linha\u2028separada", "ctrl\x01aqui", "aspas \"x\" e barra \\ ]}"],
                        "price": 49.9,
                    },
                },
                {"name": "Açaí {grátis}", "active": False, "tags": [["[a]", "{b}"], []]},
            ],
        },
        "count": 3,
    },
    ensure_ascii=False,
).replace("\\u0001", "\x01")


@pytest.fixture
def error_messages():
    messages = []
    handler_id = logger.add(messages.append, level="ERROR", format="{message}")
    yield messages
    logger.remove(handler_id)


def test_clean_llm_text_strips_fences_and_control_chars():
    raw = '```json\n{"a": "b\x00c\x07"}\n```'
    assert clean_llm_text(raw) == '{"a": "bc"}'
    assert clean_llm_text(None) == ""


def test_extract_json_span_skips_surrounding_prose():
    text = 'Claro! Aqui está: {"a": [1, 2]} Espero ter ajudado.'
    assert extract_json_span(text) == '{"a": [1, 2]}'
    assert extract_json_span("sem json aqui") is None


def test_parse_llm_json_handles_fenced_and_prose_wrapped_output():
    assert parse_llm_json('```json\n[{"name": "Corte"}]\n```') == [{"name": "Corte"}]
    assert parse_llm_json('Resposta: {"ok": true}. Obrigado!') == {"ok": True}


def test_parse_llm_json_accepts_raw_newlines_inside_strings():
    assert parse_llm_json('{"longDescription": "linha 1\nlinha 2"}') == {
        "longDescription": "linha 1\nlinha 2"
    }


@pytest.mark.parametrize("cut", range(1, len(NESTED_DOC)))
def test_every_truncation_of_a_valid_document_repairs_to_valid_json(cut):
    repaired = repair_truncated_json(NESTED_DOC[:cut])
    value = json.loads(repaired, strict=False)
    assert isinstance(value, dict)


def test_raw_fixture_carries_unescaped_characters():
    assert "\x01" in RAW_DOC
    assert "\u2028" in RAW_DOC
    assert "Café" in RAW_DOC

    value = parse_llm_json(RAW_DOC)
    notes = value["store"]["services"][0]["details"]["notes"]
    assert notes[:2] == ["linha\u2028separada", "ctrlaqui"]
    assert value["store"]["services"][1]["tags"] == [["[a]", "{b}"], []]


@pytest.mark.parametrize("cut", range(1, len(RAW_DOC)))
def test_every_truncation_of_a_raw_unicode_document_parses_to_an_object(cut):
    value = parse_llm_json(RAW_DOC[:cut])
    assert isinstance(value, dict)


def test_truncation_inside_string_keeps_brackets_as_text():
    doc = '{"services": [{"name": "Kit {premium} [aro 15]", "note": "inclui {válvula} e [bico'
    repaired = repair_truncated_json(doc)

    assert repaired.endswith('bico"}]}')
    value = json.loads(repaired)
    assert value["services"][0]["name"] == "Kit {premium} [aro 15]"
    assert value["services"][0]["note"] == "inclui {válvula} e [bico"


def test_truncation_inside_escape_sequence_drops_the_partial_escape():
    assert json.loads(repair_truncated_json('{"a": "abc\\')) == {"a": "abc"}
    assert json.loads(repair_truncated_json('{"a": "abc\\u00')) == {"a": "abc"}


def test_dangling_keys_commas_and_partial_literals_are_dropped():
    assert json.loads(repair_truncated_json('{"a": 1, "b"')) == {"a": 1}
    assert json.loads(repair_truncated_json('{"a": 1, "b": tru')) == {"a": 1}
    assert json.loads(repair_truncated_json('[1, 2, ')) == [1, 2]
    assert json.loads(repair_truncated_json('{"a": [1.')) == {"a": []}


def test_content_after_root_close_is_discarded():
    assert repair_truncated_json('{"a": 1} e mais {"b":') == '{"a": 1}'


def test_repair_salvages_prefix_before_a_syntax_error():
    assert parse_llm_json('{"a": 1 "b": 2}') == {"a": 1}


def test_stray_bracket_in_leading_prose_does_not_shadow_the_payload():
    assert parse_llm_json('Nota [1]: segue {"a": 1}') == {"a": 1}
    assert parse_llm_json('Nota [x]: segue {"a": [1, 2], "b": "fim') == {"a": [1, 2], "b": "fim"}
    assert repair_truncated_json('[1] e depois {"a": 1, "b": 2}') == '{"a": 1, "b": 2}'


def test_repair_returns_none_without_any_bracket():
    assert repair_truncated_json("nenhum json") is None


def test_truncated_reply_is_recovered_by_parse_llm_json():
    text = '```json\n[{"question": "Onde fica?", "answer": "Na Vila Galvão"}, {"question": "Abre dom'
    assert parse_llm_json(text) == [
        {"question": "Onde fica?", "answer": "Na Vila Galvão"},
        {"question": "Abre dom"},
    ]


def test_safe_parse_json_returns_the_same_fallback_object(error_messages):
    fallback = []
    assert safe_parse_json("desculpe, não consigo", fallback) is fallback
    assert error_messages


def test_safe_parse_json_logs_a_bounded_excerpt(error_messages):
    safe_parse_json("x" * 1000, None)
    assert error_messages
    logged = error_messages[-1]
    assert "x" * EXCERPT_CHARS in logged
    assert "x" * (EXCERPT_CHARS + 1) not in logged


def test_safe_parse_json_validates_against_schema(error_messages):
    fallback = []
    items = safe_parse_json(
        '[{"name": "Troca de Óleo", "description": "Com filtro", "seoTitle": "Troca de Óleo em Guarulhos"}]',
        fallback,
        List[ServiceItem],
    )
    assert items[0].seo_title == "Troca de Óleo em Guarulhos"

    assert safe_parse_json('[{"question": "Sem resposta?"}]', fallback, List[FAQItem]) is fallback
    assert any("does not match" in message for message in error_messages)
