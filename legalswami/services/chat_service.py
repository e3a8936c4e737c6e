"""
Chat Service for answering legal questions.

This module contains the ChatService class that frames user questions with
the assistant's system prompt, dispatches them upstream and keeps the
resulting exchanges.
"""

import structlog

from legalswami.exceptions import ChatNotFoundError
from legalswami.models import ChatMessage, ChatRecord, ChatRequest, Role
from legalswami.routing.dispatcher import ModelDispatcher
from legalswami.storage.memory import ChatStore

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are LegalSwami, an AI legal assistant. Provide accurate, helpful legal information. "
    "Always mention that you are an AI and not a substitute for a real lawyer. "
    "Be clear, concise, and cite relevant laws where possible."
)


class ChatService:
    """
    Orchestrates question answering and chat history.

    The service never retries on its own: a failed dispatch surfaces as
    AllModelsFailedError and nothing is stored for that request.
    """

    def __init__(self, store: ChatStore, dispatcher: ModelDispatcher):
        self.store = store
        self.dispatcher = dispatcher

    @staticmethod
    def build_messages(question: str, system_prompt: str = SYSTEM_PROMPT) -> list[dict[str, str]]:
        """System prompt first, then the user's question."""
        return [
            ChatMessage(role=Role.system, content=system_prompt).as_upstream(),
            ChatMessage(role=Role.user, content=question).as_upstream(),
        ]

    async def process_message(self, request: ChatRequest, user_id: str) -> ChatRecord:
        """
        Answer a question and store the exchange.

        Args:
            request: The user's chat request
            user_id: Owner of the new chat

        Returns:
            ChatRecord: The stored exchange

        Raises:
            AllModelsFailedError: If no model produced an answer
        """
        logger.info("processing_message", user_id=user_id, message_length=len(request.message))

        answer = await self.dispatcher.send_completion(self.build_messages(request.message))

        chat = ChatRecord(
            id=self.store.new_id(),
            user_id=user_id,
            message=request.message,
            response=answer,
            is_document=request.generate_document,
            document_type=request.document_type,
        )
        return await self.store.save(chat)

    async def get_chat_history(self, user_id: str, page: int, size: int) -> list[ChatRecord]:
        return await self.store.list_for_user(user_id, page, size)

    async def delete_chat(self, chat_id: str, user_id: str) -> None:
        """
        Raises:
            ChatNotFoundError: If the user has no chat with this id
        """
        chat = await self.store.get(chat_id, user_id)
        if chat is None:
            raise ChatNotFoundError(chat_id)

        await self.store.delete(chat.id)
        logger.info("chat_deleted", chat_id=chat_id, user_id=user_id)

    async def regenerate_response(self, chat_id: str, user_id: str) -> ChatRecord:
        """
        Ask again for a stored question and replace the answer.

        The question is resent as a single user turn, without the system prompt.

        Raises:
            ChatNotFoundError: If the user has no chat with this id
            AllModelsFailedError: If no model produced an answer
        """
        chat = await self.store.get(chat_id, user_id)
        if chat is None:
            raise ChatNotFoundError(chat_id)

        messages = [ChatMessage(role=Role.user, content=chat.message).as_upstream()]
        answer = await self.dispatcher.send_completion(messages)

        logger.info("chat_regenerated", chat_id=chat_id, user_id=user_id)
        return await self.store.save(chat.model_copy(update={"response": answer}))
