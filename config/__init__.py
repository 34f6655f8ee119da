"""Configuration package for the interview orchestrator."""
from .llm import (
    CODE_EVALUATION_TARGET,
    QUESTION_TARGET,
    SUMMARY_TARGET,
    AppConfig,
    LlmRoute,
    load_config,
    load_routes,
    resolve_registry,
    resolve_route,
)
from .settings import Settings, settings

__all__ = [
    "AppConfig",
    "CODE_EVALUATION_TARGET",
    "LlmRoute",
    "QUESTION_TARGET",
    "SUMMARY_TARGET",
    "load_config",
    "load_routes",
    "resolve_registry",
    "resolve_route",
    "Settings",
    "settings",
]
