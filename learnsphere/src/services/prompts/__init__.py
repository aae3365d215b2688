"""Prompt engineering for the Sonar API."""

from learnsphere.src.services.prompts.builder import (
    Prompt,
    build_follow_up_prompt,
    build_learning_path_prompt,
    build_query_prompt,
)
from learnsphere.src.services.prompts.domains import DOMAIN_TEMPLATES, DomainTemplate, detect_domain
from learnsphere.src.services.prompts.intent import analyze_query_intent, detect_follow_up_type

__all__ = [
    "Prompt",
    "build_query_prompt",
    "build_learning_path_prompt",
    "build_follow_up_prompt",
    "DomainTemplate",
    "DOMAIN_TEMPLATES",
    "detect_domain",
    "analyze_query_intent",
    "detect_follow_up_type",
]
