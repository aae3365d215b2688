"""
Prompt builders for queries, learning paths and follow-up questions.

Every builder returns a ``Prompt`` holding the user message text and the
system prompt sent ahead of it.
"""

from dataclasses import dataclass
from typing import Optional

from learnsphere.src.services.prompts.domains import detect_domain
from learnsphere.src.services.prompts.intent import analyze_query_intent, detect_follow_up_type
from learnsphere.src.services.prompts.templates import (
    CONTENT_TYPE_TEMPLATES,
    DEFAULT_CONTENT_TYPE,
    ENHANCED_CONTENT_TYPE_TEMPLATES,
    FOLLOW_UP_TEMPLATES,
    LEARNING_PATH_GUIDANCE,
    advanced_system_prompt,
    learning_path_template,
    level_template,
)


@dataclass(frozen=True)
class Prompt:
    text: str
    system_prompt: str


def build_query_prompt(
    query: str,
    level: str = "intermediate",
    content_type: Optional[str] = None,
    advanced: bool = True
) -> Prompt:
    """
    Build the prompt for a learning query.

    Args:
        query: The learner's question
        level: Knowledge level (unknown levels fall back to intermediate)
        content_type: Answer kind; detected from the query when omitted
        advanced: Use domain aware templates and the detailed level prompts

    Returns:
        Prompt text and system prompt
    """
    if content_type is None:
        content_type = analyze_query_intent(query)

    if advanced:
        template = detect_domain(query) or ENHANCED_CONTENT_TYPE_TEMPLATES.get(
            content_type, ENHANCED_CONTENT_TYPE_TEMPLATES[DEFAULT_CONTENT_TYPE]
        )
        return Prompt(
            text=f"{template.prefix}{query}{template.suffix}",
            system_prompt=f"{advanced_system_prompt(level)}\n\n{template.system_suffix}",
        )

    base = level_template(level)
    template = CONTENT_TYPE_TEMPLATES.get(content_type, base)
    return Prompt(
        text=f"{template.prefix}{query}{template.suffix}",
        system_prompt=base.system_prompt,
    )


def build_learning_path_prompt(topic: str, level: str = "intermediate", advanced: bool = True) -> Prompt:
    """Build the prompt asking for a staged learning path on a topic."""
    template = learning_path_template(level)
    text = f"{template.prefix}{topic}{template.suffix}"

    if not advanced:
        return Prompt(text=text, system_prompt=template.system_prompt)

    system_prompt = "\n\n".join([
        advanced_system_prompt(level),
        template.system_prompt,
        LEARNING_PATH_GUIDANCE,
    ])
    return Prompt(text=text, system_prompt=system_prompt)


def build_follow_up_prompt(
    query: str,
    level: str = "intermediate",
    advanced: bool = True,
    context_retention: bool = True
) -> Prompt:
    """
    Build the prompt for a follow-up question.

    The text is the question itself; earlier turns travel as chat messages.
    With context retention the system prompt adds guidance for the detected
    follow-up type.
    """
    if advanced and context_retention:
        follow_up_type = detect_follow_up_type(query)
        system_prompt = f"{advanced_system_prompt(level)}\n\n{FOLLOW_UP_TEMPLATES[follow_up_type]}"
        return Prompt(text=query, system_prompt=system_prompt)

    return Prompt(text=query, system_prompt=level_template(level).system_prompt)
