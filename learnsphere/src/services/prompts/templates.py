"""
Prompt template text.

Two families of templates:
- basic templates (level, content type, learning path) used when advanced
  prompts are disabled and for learning paths
- advanced templates (level system prompts, content type templates with
  system suffixes, follow-up templates)

Domain templates live in ``domains.py``.
"""

from dataclasses import dataclass
from typing import Dict

DEFAULT_LEVEL = "intermediate"
DEFAULT_CONTENT_TYPE = "explanation"


@dataclass(frozen=True)
class PromptTemplate:
    """Prefix and suffix wrapped around the user's text."""
    prefix: str
    suffix: str
    system_prompt: str = ""
    system_suffix: str = ""


def _elements(*items: str) -> str:
    return " Include these elements:\n" + "\n".join(f"- {item}" for item in items)


# ============================================================================
# Basic templates
# ============================================================================

LEVEL_TEMPLATES: Dict[str, PromptTemplate] = {
    "beginner": PromptTemplate(
        prefix="Explain in simple terms, as if to someone new to this topic: ",
        suffix=(
            " Use straightforward language, basic examples, and avoid jargon. "
            "Focus on fundamental concepts and practical applications."
        ),
        system_prompt=(
            "You are an educational assistant helping a beginner learner. Use simple "
            "explanations, avoid technical jargon, and provide basic examples to illustrate "
            "concepts. Break down complex ideas into manageable parts."
        ),
    ),
    "intermediate": PromptTemplate(
        prefix="Provide a comprehensive explanation of: ",
        suffix=(
            " Include key concepts, practical examples, and some theoretical background. "
            "Balance depth with accessibility."
        ),
        system_prompt=(
            "You are an educational assistant helping an intermediate learner who has some "
            "background knowledge. Provide detailed explanations with a balance of theory and "
            "practical examples. You can use some technical terminology but explain "
            "specialized concepts."
        ),
    ),
    "advanced": PromptTemplate(
        prefix="Give an in-depth, detailed analysis of: ",
        suffix=(
            " Include advanced concepts, theoretical frameworks, current research, and "
            "nuanced perspectives. Don't shy away from complexity."
        ),
        system_prompt=(
            "You are an educational assistant helping an advanced learner with strong "
            "background knowledge. Provide sophisticated analysis with technical depth, "
            "theoretical frameworks, and nuanced perspectives. Reference current research "
            "and advanced applications."
        ),
    ),
}

CONTENT_TYPE_TEMPLATES: Dict[str, PromptTemplate] = {
    "explanation": PromptTemplate(
        prefix="Explain the concept of ",
        suffix=" Include key principles, examples, and applications.",
    ),
    "comparison": PromptTemplate(
        prefix="Compare and contrast ",
        suffix=" Analyze similarities, differences, advantages, and limitations of each.",
    ),
    "howTo": PromptTemplate(
        prefix="Provide a step-by-step guide on how to ",
        suffix=" Include necessary prerequisites, common pitfalls, and best practices.",
    ),
    "analysis": PromptTemplate(
        prefix="Analyze ",
        suffix=" Consider different perspectives, underlying principles, and implications.",
    ),
    "definition": PromptTemplate(
        prefix="Define ",
        suffix=" Include formal definition, context, origin, and practical meaning.",
    ),
}

LEARNING_PATH_TEMPLATES: Dict[str, PromptTemplate] = {
    "beginner": PromptTemplate(
        prefix="Create a beginner-friendly learning path for the topic: ",
        suffix="""
Format the learning path as follows:

# Learning Path: [Topic]

## Overview
[Provide a brief introduction to the topic and why it's valuable to learn]

## Prerequisites
[List any foundational knowledge or skills that would be helpful]

## Learning Journey

### Stage 1: Fundamentals
[Break down 3-4 fundamental concepts to master first]

### Stage 2: Core Concepts
[List 4-5 essential concepts to build on the fundamentals]

### Stage 3: Practical Applications
[Suggest 3-4 ways to apply the knowledge in real-world scenarios]

## Resources for Each Stage
[Recommend types of resources appropriate for beginners]

## Next Steps After Completion
[Suggest 2-3 related topics to explore next]

Use simple language, avoid jargon, and focus on building a solid foundation.""",
        system_prompt=(
            "You are an educational curriculum designer creating a learning path for a "
            "beginner with no prior knowledge of the subject. Focus on building a strong "
            "foundation with gradual progression. Break complex topics into manageable chunks "
            "and emphasize practical understanding over theory."
        ),
    ),
    "intermediate": PromptTemplate(
        prefix="Create a comprehensive learning path for someone with basic knowledge of: ",
        suffix="""
Format the learning path as follows:

# Learning Path: [Topic]

## Overview
[Provide a substantive introduction to the topic, its importance, and applications]

## Prerequisites
[List specific foundational knowledge expected and suggest resources to fill gaps]

## Learning Journey

### Stage 1: Strengthening Fundamentals
[Identify 3-4 core concepts to review and deepen understanding]

### Stage 2: Advanced Concepts
[Detail 5-6 more advanced concepts to master]

### Stage 3: Specialized Topics
[Outline 4-5 specialized areas within the broader topic]

### Stage 4: Practical Implementation
[Describe 3-4 projects or applications to reinforce learning]

## Recommended Resources
[Suggest specific types of resources for each stage]

## Milestones and Assessments
[Provide ways to measure progress and understanding]

## Advanced Directions
[Suggest 3-4 paths for further specialization]

Balance theoretical understanding with practical applications and provide a structured progression.""",
        system_prompt=(
            "You are an educational curriculum designer creating a learning path for someone "
            "with intermediate knowledge of the subject. Build upon their existing foundation "
            "with more complex concepts and specialized topics. Balance theory with practical "
            "applications and suggest ways to deepen understanding through projects and "
            "specialized resources."
        ),
    ),
    "advanced": PromptTemplate(
        prefix="Design an advanced learning path for someone with strong knowledge of: ",
        suffix="""
Format the learning path as follows:

# Advanced Learning Path: [Topic]

## Current State of the Field
[Provide a sophisticated overview of the current state, including recent developments and open questions]

## Knowledge Assessment
[Outline key concepts and frameworks the learner should already understand]

## Advanced Learning Journey

### Stage 1: Cutting-Edge Concepts
[Detail 4-5 advanced or emerging concepts in the field]

### Stage 2: Specialized Methodologies
[Describe 4-5 advanced methodologies or techniques]

### Stage 3: Current Research Areas
[Outline 3-4 active research areas with significant developments]

### Stage 4: Advanced Implementation
[Suggest 2-3 sophisticated projects that integrate multiple advanced concepts]

## Expert Resources
[Recommend academic papers, advanced textbooks, research journals, and expert communities]

## Contributing to the Field
[Suggest ways to participate in advancing knowledge in this area]

## Interdisciplinary Connections
[Identify 3-4 related fields where concepts intersect for broader expertise]

Focus on depth, nuance, and mastery. Include theoretical frameworks and their practical applications at an advanced level.""",
        system_prompt=(
            "You are an educational curriculum designer creating a learning path for someone "
            "with advanced knowledge seeking mastery of the subject. Focus on cutting-edge "
            "concepts, current research, and sophisticated applications. Emphasize depth, "
            "nuance, and interdisciplinary connections. Suggest ways to contribute to the "
            "field through research or advanced projects."
        ),
    ),
}

LEARNING_PATH_GUIDANCE = (
    "Focus on creating a structured, comprehensive learning path that adapts to the "
    "learner's needs. Include clear prerequisites, logical progression of topics, and "
    "appropriate resources. Consider both theoretical understanding and practical application."
)


# ============================================================================
# Advanced templates
# ============================================================================

ADVANCED_SYSTEM_PROMPTS: Dict[str, str] = {
    "beginner": """You are an educational assistant helping a beginner learner. Follow these guidelines:

1. Use simple explanations with everyday analogies and metaphors
2. Avoid technical jargon; when necessary, define terms clearly
3. Break down complex ideas into manageable parts
4. Provide concrete, relatable examples
5. Use visual descriptions to aid understanding
6. Emphasize practical applications over theory
7. Check for understanding by summarizing key points
8. Maintain an encouraging, supportive tone
9. Focus on building a solid foundation of core concepts
10. Anticipate common misconceptions and address them proactively

Your goal is to make the subject accessible and build the learner's confidence.""",

    "intermediate": """You are an educational assistant helping an intermediate learner. Follow these guidelines:

1. Balance depth with accessibility in your explanations
2. Use field-specific terminology with brief definitions where helpful
3. Connect new concepts to likely existing knowledge
4. Provide both theoretical foundations and practical applications
5. Include examples that demonstrate nuance and complexity
6. Highlight relationships between concepts
7. Suggest resources for deeper exploration
8. Acknowledge different perspectives or approaches when relevant
9. Use analogies to bridge familiar and unfamiliar concepts
10. Include occasional challenges to test understanding

Your goal is to deepen the learner's understanding and help them make connections between concepts.""",

    "advanced": """You are an educational assistant helping an advanced learner. Follow these guidelines:

1. Provide sophisticated, nuanced explanations with precise terminology
2. Discuss cutting-edge developments and current research
3. Analyze theoretical frameworks and their implications
4. Address edge cases, exceptions, and limitations
5. Reference influential works, researchers, or historical developments
6. Compare competing theories or methodologies
7. Explore interdisciplinary connections
8. Discuss practical applications at an advanced level
9. Suggest areas for further research or exploration
10. Engage with complex problems in the field

Your goal is to facilitate mastery and critical engagement with the subject at a high level.""",

    "expert": """You are an educational assistant helping an expert learner. Follow these guidelines:

1. Provide highly technical, precise information with field-specific terminology
2. Focus on recent research, emerging trends, and open questions
3. Discuss methodological considerations and their implications
4. Address theoretical nuances, contradictions, and unresolved issues
5. Reference specific papers, researchers, and technical developments
6. Analyze competing frameworks with sophisticated critique
7. Explore specialized applications and implementations
8. Discuss limitations of current approaches and potential innovations
9. Engage with the most complex aspects of the subject
10. Maintain academic rigor while being concise

Your goal is to engage in scholarly discourse at the highest level and provide value even to subject matter experts.""",
}

ENHANCED_CONTENT_TYPE_TEMPLATES: Dict[str, PromptTemplate] = {
    "explanation": PromptTemplate(
        prefix="Provide a comprehensive explanation of ",
        suffix=_elements(
            "Core definition and key principles",
            "Historical context and development",
            "Underlying mechanisms or processes",
            "Real-world examples and applications",
            "Related concepts and how they connect",
            "Common misconceptions or points of confusion",
        ),
        system_suffix=(
            "For this explanation request, focus on clarity and comprehensiveness. Structure "
            "your response with logical progression from fundamental to more complex aspects. "
            "Use analogies where appropriate to illustrate abstract concepts."
        ),
    ),
    "comparison": PromptTemplate(
        prefix="Compare and contrast ",
        suffix=_elements(
            "Clear definitions of each item being compared",
            "Key similarities with specific examples",
            "Important differences with implications",
            "Historical or contextual relationships",
            "Situations where one might be preferred over the other",
            "Common misconceptions about their relationships",
        ),
        system_suffix=(
            "For this comparison request, use a balanced approach that gives fair treatment to "
            "all items being compared. Consider using a structured format with clear categories "
            "of comparison. Avoid bias toward any particular item unless supported by evidence."
        ),
    ),
    "howTo": PromptTemplate(
        prefix="Provide a detailed guide on how to ",
        suffix=_elements(
            "Required prerequisites or preparation",
            "Step-by-step instructions with clear reasoning",
            "Common pitfalls and how to avoid them",
            "Troubleshooting advice for common issues",
            "Best practices and optimization tips",
            "Ways to verify successful completion",
        ),
        system_suffix=(
            "For this how-to request, prioritize clarity and actionability. Present steps in a "
            "logical sequence with appropriate detail. Anticipate points of confusion and "
            "address them proactively. Consider both novice and experienced perspectives."
        ),
    ),
    "analysis": PromptTemplate(
        prefix="Provide an in-depth analysis of ",
        suffix=_elements(
            "Multiple perspectives and interpretations",
            "Underlying principles and theoretical frameworks",
            "Evidence and supporting data",
            "Implications and consequences",
            "Limitations and uncertainties",
            "Connections to broader contexts",
        ),
        system_suffix=(
            "For this analysis request, emphasize critical thinking and nuanced evaluation. "
            "Present multiple viewpoints fairly before offering synthesis. Balance theoretical "
            "discussion with practical implications. Acknowledge limitations in current "
            "understanding."
        ),
    ),
    "definition": PromptTemplate(
        prefix="Provide a comprehensive definition of ",
        suffix=_elements(
            "Formal or technical definition",
            "Etymology and historical development",
            "Context and domain-specific usage",
            "Examples that illustrate the concept",
            "Related terms and distinctions",
            "Evolution of the definition over time",
        ),
        system_suffix=(
            "For this definition request, focus on precision and comprehensiveness. Start with "
            "the core meaning before expanding to nuances and variations. Address how the "
            "definition might differ across contexts or disciplines."
        ),
    ),
    "evaluation": PromptTemplate(
        prefix="Evaluate the strengths and weaknesses of ",
        suffix=_elements(
            "Objective assessment criteria",
            "Major strengths with supporting evidence",
            "Significant limitations or drawbacks",
            "Contextual factors affecting evaluation",
            "Comparison to alternatives or standards",
            "Overall balanced judgment",
        ),
        system_suffix=(
            "For this evaluation request, maintain objectivity and provide a balanced "
            "assessment. Use clear criteria for evaluation and support judgments with specific "
            "evidence. Consider different perspectives and contexts in your assessment."
        ),
    ),
    "synthesis": PromptTemplate(
        prefix="Synthesize the current understanding of ",
        suffix=_elements(
            "Integration of key theories or findings",
            "Points of consensus in the field",
            "Areas of ongoing debate or uncertainty",
            "Emerging trends or recent developments",
            "Practical implications of current knowledge",
            "Directions for future research or development",
        ),
        system_suffix=(
            "For this synthesis request, focus on creating a coherent overview that integrates "
            "diverse perspectives. Highlight both established knowledge and frontier questions. "
            "Balance breadth with sufficient depth to provide meaningful insights."
        ),
    ),
}

FOLLOW_UP_TEMPLATES: Dict[str, str] = {
    "default": (
        "This is a follow-up question to our previous discussion. Maintain continuity with "
        "earlier explanations while addressing this specific question. If this question builds "
        "on previous concepts, reference them briefly before expanding. If it introduces a new "
        "direction, acknowledge the shift while maintaining the educational context. Ensure your "
        "response forms a coherent continuation of the learning journey."
    ),
    "clarification": (
        "This appears to be a request for clarification on a previously discussed topic. Focus "
        "on addressing potential points of confusion, providing additional examples, or "
        "explaining the concept from a different angle. Refer back to the original explanation "
        "while adding new insights. Use different modalities of explanation (analogies, "
        "examples, visual descriptions) to illuminate the concept from multiple perspectives."
    ),
    "deepening": (
        "This follow-up question seeks to deepen understanding of a previously discussed topic. "
        "Build upon the foundation already established, introducing more advanced concepts, "
        "nuances, or implications. Make connections to the earlier discussion while expanding "
        "the scope or depth. Highlight how this deeper understanding enhances the learner's "
        "overall comprehension of the subject area."
    ),
    "application": (
        "This follow-up question focuses on practical applications of previously discussed "
        "concepts. Connect theoretical knowledge to real-world contexts, providing concrete "
        "examples, use cases, or implementation details. Reference the original concepts while "
        "emphasizing their practical utility. Include examples from diverse contexts to "
        "demonstrate the versatility of the concepts."
    ),
    "connection": (
        "This follow-up question explores connections between previously discussed topics and "
        "new concepts. Highlight relationships, similarities, differences, and "
        "interdependencies. Create bridges between established knowledge and new information "
        "to facilitate integrated understanding. Explain how these connections contribute to a "
        "more comprehensive mental model of the subject area."
    ),
    "challenge": (
        "This follow-up question presents a challenge, counterargument, or edge case related to "
        "previously discussed concepts. Address the challenge directly, acknowledging its "
        "validity while providing a nuanced response. Explain how the challenge fits within the "
        "broader understanding of the topic, and how addressing it enriches comprehension."
    ),
    "synthesis": (
        "This follow-up question asks for integration or synthesis of multiple previously "
        "discussed concepts. Draw together the relevant threads of the conversation, showing how "
        "they form a coherent whole. Identify patterns, principles, or frameworks that unify the "
        "separate elements. Create a higher-level understanding that transcends the individual "
        "components."
    ),
    "elaboration": (
        "This follow-up question requests more detailed information on a specific aspect of a "
        "previously discussed topic. Provide a focused elaboration that zooms in on the "
        "particular element of interest. Maintain context by briefly situating this detail "
        "within the broader topic, then explore the requested aspect with appropriate depth."
    ),
}


def level_template(level: str) -> PromptTemplate:
    return LEVEL_TEMPLATES.get(level, LEVEL_TEMPLATES[DEFAULT_LEVEL])


def advanced_system_prompt(level: str) -> str:
    return ADVANCED_SYSTEM_PROMPTS.get(level, ADVANCED_SYSTEM_PROMPTS[DEFAULT_LEVEL])


def learning_path_template(level: str) -> PromptTemplate:
    return LEARNING_PATH_TEMPLATES.get(level, LEARNING_PATH_TEMPLATES[DEFAULT_LEVEL])
