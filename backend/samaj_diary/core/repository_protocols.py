"""Boundary Protocols: contracts between core/services and the outside world.

Invariants:
    - Services depend on these Protocols, never on concrete HTTP clients
    - Implementations live in infrastructure/; tests supply in-memory fakes
"""

from dataclasses import dataclass, field
from typing import Protocol


class DocumentStore(Protocol):
    """Path-addressed JSON document store."""
    async def list_documents(self, collection: str) -> list[dict]: ...
    async def create_document(self, collection: str, data: dict) -> str: ...
    async def update_document(
        self, collection: str, doc_id: str, data: dict,
    ) -> None: ...
    async def delete_document(self, collection: str, doc_id: str) -> None: ...
    async def get_document(self, path: str) -> dict | None: ...
    async def patch_document(self, path: str, data: dict) -> None: ...
    async def health_check(self) -> bool: ...


class OtpSender(Protocol):
    """Messaging gateway that delivers a templated one-time code."""
    async def send_otp(self, mobile: str, code: str) -> bool: ...


@dataclass
class GeneratedText:
    text: str
    sources: list[dict] = field(default_factory=list)


class TextGenerator(Protocol):
    """Single-turn prompt-in / text-out language model."""
    async def generate_text(
        self, prompt: str, *, max_tokens: int = 500, web_search: bool = False,
    ) -> GeneratedText: ...
