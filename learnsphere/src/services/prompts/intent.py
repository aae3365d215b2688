"""Keyword rules that classify learning queries and follow-up questions."""

from typing import Optional, Sequence, Tuple

# (content type, phrases matched at the start, phrases matched anywhere)
QUERY_INTENT_RULES: Sequence[Tuple[str, Tuple[str, ...], Tuple[str, ...]]] = (
    (
        "howTo",
        ("how to",),
        ("steps to", "guide for", "process of", "procedure for", "instructions for", "method for"),
    ),
    (
        "comparison",
        (),
        (" vs ", " versus ", "compare", "difference between", "similarities between",
         "contrasting", "distinguish between"),
    ),
    (
        "definition",
        ("what is", "define"),
        ("meaning of", "definition of", "concept of"),
    ),
    (
        "analysis",
        (),
        ("analyze", "examine", "evaluate", "assess", "critique", "review", "study the",
         "implications of"),
    ),
    (
        "evaluation",
        (),
        ("pros and cons", "advantages and disadvantages", "benefits and drawbacks",
         "strengths and weaknesses", "evaluate the", "assess the value", "how effective"),
    ),
    (
        "synthesis",
        (),
        ("synthesize", "integrate", "combine", "current understanding", "state of the art",
         "current research", "bring together"),
    ),
)

FOLLOW_UP_RULES: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("clarification", (
        "what do you mean", "could you clarify", "i don't understand", "can you explain",
        "what is the difference", "can you give an example", "clarify", "confused about",
        "not clear", "explain again", "simpler terms",
    )),
    ("deepening", (
        "tell me more about", "how does", "why does", "what causes", "what are the implications",
        "how would you explain", "what is the theory behind", "more detail", "deeper explanation",
        "elaborate on", "in depth", "underlying principles",
    )),
    ("application", (
        "how can i use", "how is this applied", "what are some applications",
        "how would this work in", "can you give a practical example", "how is this implemented",
        "real world", "practical use", "in practice", "apply this", "implement this", "use case",
    )),
    ("connection", (
        "how does this relate to", "what is the connection", "how does this compare to",
        "is this similar to", "how does this fit with", "relate", "connection between",
        "linked to", "relationship between", "compared to", "differs from",
    )),
    ("challenge", (
        "but what about", "what if", "isn't it true that", "how do you explain",
        "doesn't this contradict", "challenge", "problem with", "issue with", "critique",
        "limitation", "weakness", "counterargument",
    )),
    ("synthesis", (
        "how do all these", "putting it all together", "synthesize", "integrate", "combine",
        "overall picture", "big picture", "framework", "summarize", "tie together",
        "unifying theory",
    )),
    ("elaboration", (
        "more about", "specifically", "in particular", "focus on", "zoom in on", "elaborate",
        "expand on", "more information about", "details about", "tell me about the part",
    )),
)


def analyze_query_intent(query: Optional[str]) -> str:
    """
    Classify what kind of answer a query asks for.

    Rules are checked in order and the first match wins.

    Returns:
        One of howTo, comparison, definition, analysis, evaluation,
        synthesis or explanation
    """
    if not query:
        return "explanation"

    lower_query = query.lower()
    for content_type, prefixes, phrases in QUERY_INTENT_RULES:
        if prefixes and lower_query.startswith(prefixes):
            return content_type
        if any(phrase in lower_query for phrase in phrases):
            return content_type
        if content_type == "definition" and "term " in lower_query and " mean" in lower_query:
            return content_type

    return "explanation"


def detect_follow_up_type(query: Optional[str]) -> str:
    """Classify a follow-up question; ``default`` when no rule matches."""
    if not query:
        return "default"

    lower_query = query.lower()
    for follow_up_type, phrases in FOLLOW_UP_RULES:
        if any(phrase in lower_query for phrase in phrases):
            return follow_up_type

    return "default"
