"""LLM route configuration loaded from the JSON app config."""
from __future__ import annotations

from pathlib import Path
from typing import Dict

from pydantic import BaseModel, Field


QUESTION_TARGET = "interview.question"
CODE_EVALUATION_TARGET = "interview.code_evaluation"
SUMMARY_TARGET = "interview.summary"


class LlmRoute(BaseModel):
    """LLM endpoint configuration."""

    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(default=45.0, ge=0.1)
    api_key_env: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    sequential: bool = False
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, ge=1)


class AppConfig(BaseModel):
    """Application configuration root."""

    llm_routes: Dict[str, LlmRoute]
    registry: Dict[str, str]


def load_config(path: Path) -> AppConfig:
    """Load configuration from disk."""

    data = path.read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def resolve_route(cfg: AppConfig, target: str) -> LlmRoute:
    """Return the route bound to ``target`` in the registry."""

    if target not in cfg.registry:
        raise KeyError(f"Registry entry missing for '{target}'")
    route_id = cfg.registry[target]
    if route_id not in cfg.llm_routes:
        raise KeyError(f"Route '{route_id}' missing for '{target}'")
    return cfg.llm_routes[route_id]


def resolve_registry(cfg: AppConfig, targets: tuple[str, ...] = (QUESTION_TARGET, CODE_EVALUATION_TARGET, SUMMARY_TARGET)) -> Dict[str, LlmRoute]:
    """Resolve every interview target to its route, failing on the first gap."""

    return {target: resolve_route(cfg, target) for target in targets}


def load_routes(path: Path) -> Dict[str, LlmRoute]:
    """Load configuration and resolve all interview targets."""

    return resolve_registry(load_config(path))
