from functools import lru_cache
from typing import AsyncIterator, List, Optional

import requests
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_ollama import ChatOllama

from travel_chat.exceptions.custom_exceptions import LLMServiceError
from travel_chat.models.schemas import ChatMessage
from travel_chat.services.location_service.prompt import travel_prompt
from travel_chat.utils.config import settings
from travel_chat.utils.logging import get_logger

# Create a logger specific to this module
logger = get_logger("travel_chat.services.llm_service")


def to_langchain_messages(messages: List[ChatMessage]) -> List[BaseMessage]:
    return [
        AIMessage(content=msg.content) if msg.role == "assistant" else HumanMessage(content=msg.content)
        for msg in messages
    ]


class LLMService:
    def __init__(self):
        logger.info("LLMService initializing...Checking for Ollama")
        self.ollama_available = self._check_ollama_available()
        self.chat_model = self._init_chat_model()

    def _check_ollama_available(self) -> bool:
        """Check if Ollama server is running and reachable"""
        try:
            response = requests.get(f"{settings.ollama_base_url}/api/tags", timeout=10)
            return response.status_code == 200
        except (requests.ConnectionError, requests.Timeout):
            logger.warning("Ollama server not available")
            return False

    def _init_chat_model(self) -> Optional[ChatOllama]:
        if not self.ollama_available:
            logger.warning("Ollama not available, chat model will be None")
            return None
        try:
            return ChatOllama(
                model=settings.ollama_model,
                base_url=settings.ollama_base_url,
                temperature=settings.llm_temperature,
                keep_alive=1200
            )
        except Exception as e:
            logger.error(f"Chat model initialization failed: {e}")
            raise LLMServiceError(f"Could not initialize chat model: {e}")

    def get_chat_model(self) -> Optional[ChatOllama]:
        """Get the current chat model, retrying initialization if Ollama came up later"""
        if self.chat_model is None:
            self.ollama_available = self._check_ollama_available()
            self.chat_model = self._init_chat_model()
        return self.chat_model

    async def stream_chat(self, messages: List[ChatMessage]) -> AsyncIterator[str]:
        """Stream the assistant reply as delta chunks"""
        chat_model = self.get_chat_model()
        if chat_model is None:
            raise LLMServiceError("Ollama is not available")

        chain = travel_prompt | chat_model
        logger.info(f"Streaming reply for {len(messages)} messages with model {settings.ollama_model}")
        async for chunk in chain.astream({"history": to_langchain_messages(messages)}):
            if chunk.content:
                yield chunk.content
        logger.info("Stream generation completed successfully.")


@lru_cache(maxsize=1)
def get_llm_service() -> LLMService:
    return LLMService()
