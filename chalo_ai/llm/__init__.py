# llm/__init__.py
"""
LLM Components Package

Contains the language-facing components:
- intent_parser: classify chat messages, pull out deal ids
- document_qa: keyword retrieval over policy documents + LLM answer
- prompts: prompt templates
"""

from .intent_parser import intent_parser, IntentParser, IntentType, ParsedIntent, parse_intent
from .document_qa import DocumentQA, LLMClient, LLMError, fallback_answer

__all__ = [
    "intent_parser",
    "IntentParser",
    "IntentType",
    "ParsedIntent",
    "parse_intent",
    "DocumentQA",
    "LLMClient",
    "LLMError",
    "fallback_answer",
]
