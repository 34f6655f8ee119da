from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import (
    SYSTEM_PROMPT,
    HttpClient,
    HttpResponse,
    LanguageModel,
    LlmGatewayError,
    RouteGateway,
    ask,
    chat,
    parse_json_object,
    runnable,
    strip_code_fences,
)

__all__ = [
    "SYSTEM_PROMPT",
    "HttpClient",
    "HttpResponse",
    "LanguageModel",
    "LlmGatewayError",
    "RouteGateway",
    "ask",
    "chat",
    "parse_json_object",
    "runnable",
    "strip_code_fences",
]
