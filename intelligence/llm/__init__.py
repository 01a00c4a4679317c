"""
LLM Module
OpenAI-compatible LLM abstraction (OpenAI, OpenRouter)
"""
from .base import BaseLLM, LLMResponse, Message, MessageRole
from .openai_llm import OpenAILLM
from .factory import get_llm, get_task_llm

__all__ = [
    "BaseLLM",
    "LLMResponse",
    "Message",
    "MessageRole",
    "OpenAILLM",
    "get_llm",
    "get_task_llm",
]
