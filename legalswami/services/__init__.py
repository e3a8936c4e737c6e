"""
Service layer for the LegalSwami API.

This module turns chat requests into dispatched completions and stored exchanges.
"""

from legalswami.services.chat_service import ChatService

__all__ = ["ChatService"]
