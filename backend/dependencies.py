from __future__ import annotations

from fastapi import Request

from .llm.groq_client import TextModel
from .store.firestore import MenuStore


def get_store(request: Request) -> MenuStore:
    """Return the store built at startup."""
    return request.app.state.store


def get_model(request: Request) -> TextModel:
    """Return the language model client built at startup."""
    return request.app.state.model
