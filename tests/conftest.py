import os
import sys
from typing import Any, List, Optional, Tuple

# --- Ensure project root is on sys.path so `import core...` works ---
PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

from core.copy_models import MarketingCopyInput
from utils.llm_client import LLMClient


class FakeLLMClient(LLMClient):
    """
    Scripted client: each complete() call pops the next reply.

    A reply that is an exception instance is raised instead of returned.
    Once the script runs out every call returns "".
    """

    provider = "fake"

    def __init__(self, replies: Optional[List[Any]] = None) -> None:
        self.replies = list(replies or [])
        self.calls: List[Tuple[str, str, int, float]] = []

    async def complete(self, system_prompt, user_prompt, *, max_tokens, temperature):
        self.calls.append((system_prompt, user_prompt, max_tokens, temperature))
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, BaseException):
            raise reply
        return reply

    @property
    def temperatures(self) -> List[float]:
        return [call[3] for call in self.calls]

    @property
    def prompts(self) -> List[str]:
        return [call[1] for call in self.calls]


@pytest.fixture
def fake_client_cls():
    return FakeLLMClient


@pytest.fixture
def store_input():
    return MarketingCopyInput(
        business_name="Borracharia Salmo 23 Ltda",
        category="Borracharia",
        city="Guarulhos",
        state="SP",
    )


@pytest.fixture
def rich_store_input():
    return MarketingCopyInput(
        business_name="Barbearia Navalha de Ouro",
        category="Barbearia",
        city="São José dos Campos",
        state="SP",
        rating=4.8,
        review_count=312,
        google_about="<p>Barbearia tradicional <b>desde 1998</b></p><script>track()</script>",
        address="Rua Sete de Setembro, 100 - Centro",
        opening_hours={"Segunda": "09:00-19:00", "Sábado": "08:00-14:00"},
        business_attributes=["Aceita Pix", "Estacionamento"],
        review_highlights="Corte rápido, barba bem feita, preço justo.",
    )
