"""Concrete completion backends."""

from .openai_client import build_client, openai_chat_backend, openai_text_backend

__all__ = ["build_client", "openai_chat_backend", "openai_text_backend"]
