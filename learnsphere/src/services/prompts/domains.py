"""
Subject domain templates and weighted keyword detection.

Each domain carries its own prompt framing and a keyword list. A query is
scored against every domain and the best scoring one (if it clears
``DOMAIN_SCORE_THRESHOLD``) frames the prompt instead of the content type
template.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from learnsphere.src.services.prompts.templates import _elements

DOMAIN_SCORE_THRESHOLD = 1.0
PARTIAL_MATCH_FACTOR = 0.5
MIN_PARTIAL_WORD_LENGTH = 4


@dataclass(frozen=True)
class DomainTemplate:
    """Prompt framing for one subject domain."""
    name: str
    prefix: str
    suffix: str
    system_suffix: str
    keywords: Tuple[str, ...] = field(default_factory=tuple)
    weight: float = 1.0


DOMAIN_TEMPLATES: Dict[str, DomainTemplate] = {}


def _register(template: DomainTemplate) -> None:
    DOMAIN_TEMPLATES[template.name] = template


_register(DomainTemplate(
    name="computerScience",
    prefix="Explain the computer science concept of ",
    suffix=_elements(
        "Theoretical foundations and formal definitions",
        "Algorithmic or computational principles",
        "Implementation considerations and trade-offs",
        "Code examples in relevant languages",
        "Applications and use cases",
        "Historical development and key contributors",
    ),
    system_suffix=(
        "For this computer science topic, balance theoretical understanding with practical "
        "implementation details. Include code examples where appropriate, using proper syntax "
        "highlighting and comments. Reference relevant algorithms, data structures, or design "
        "patterns."
    ),
    keywords=(
        "programming", "coding", "software", "algorithm", "data structure", "computer",
        "web development", "database", "network", "cybersecurity", "artificial intelligence",
        "machine learning", "operating system", "compiler", "frontend", "backend", "fullstack",
        "devops", "cloud computing", "distributed systems", "blockchain", "cryptography",
        "quantum computing", "computer architecture", "software engineering", "agile", "scrum",
    ),
    weight=2.0,
))

_register(DomainTemplate(
    name="mathematics",
    prefix="Explain the mathematical concept of ",
    suffix=_elements(
        "Formal definitions and notation",
        "Theorems, properties, and proofs",
        "Visual or geometric interpretations",
        "Examples and counterexamples",
        "Applications within and outside mathematics",
        "Historical context and development",
    ),
    system_suffix=(
        "For this mathematics topic, provide clear explanations with precise definitions and "
        "logical development. Include visual representations or examples where helpful. Balance "
        "rigor with intuitive understanding. Use proper mathematical notation and formatting."
    ),
    keywords=(
        "math", "calculus", "algebra", "geometry", "statistics", "probability",
        "number theory", "discrete mathematics", "linear algebra", "differential equations",
        "topology", "analysis", "numerical methods", "optimization", "graph theory",
        "set theory", "logic", "category theory", "combinatorics", "game theory",
        "mathematical modeling", "operations research", "cryptography", "fractals",
        "chaos theory", "dynamical systems", "mathematical physics",
    ),
    weight=2.0,
))

_register(DomainTemplate(
    name="naturalSciences",
    prefix="Explain the scientific concept of ",
    suffix=_elements(
        "Scientific definition and theoretical framework",
        "Empirical evidence and experimental findings",
        "Natural mechanisms and processes",
        "Practical applications and implications",
        "Current research and open questions",
        "Historical development of understanding",
    ),
    system_suffix=(
        "For this natural science topic, emphasize evidence-based explanations and scientific "
        "methodology. Balance theoretical models with empirical findings. Distinguish between "
        "established knowledge and areas of ongoing research. Use appropriate scientific "
        "terminology with clear explanations."
    ),
    keywords=(
        "physics", "chemistry", "biology", "astronomy", "geology", "ecology",
        "evolution", "genetics", "molecular biology", "organic chemistry", "inorganic chemistry",
        "quantum mechanics", "relativity", "thermodynamics", "electromagnetism", "optics",
        "fluid dynamics", "astrophysics", "cosmology", "particle physics", "nuclear physics",
        "biochemistry", "cell biology", "microbiology", "anatomy", "physiology",
        "neuroscience", "immunology", "ecology", "environmental science", "earth science",
        "dna", "periodic table", "elements", "theory of relativity",
    ),
    weight=1.8,
))

_register(DomainTemplate(
    name="socialSciences",
    prefix="Explain the social science concept of ",
    suffix=_elements(
        "Conceptual definition and theoretical frameworks",
        "Research methodologies and key findings",
        "Social, cultural, or psychological factors",
        "Real-world examples and case studies",
        "Practical applications and policy implications",
        "Different perspectives and scholarly debates",
    ),
    system_suffix=(
        "For this social science topic, present multiple theoretical perspectives and "
        "methodological approaches. Balance empirical research with conceptual analysis. "
        "Acknowledge the complexity of social phenomena and the role of context. Consider "
        "ethical implications where relevant."
    ),
    keywords=(
        "psychology", "sociology", "anthropology", "economics", "political science",
        "linguistics", "archaeology", "geography", "history", "education",
        "cognitive psychology", "developmental psychology", "social psychology", "behavioral economics",
        "cultural anthropology", "sociolinguistics", "human geography", "demography",
        "international relations", "public policy", "urban planning", "criminology",
        "gender studies", "ethnic studies", "media studies", "communication",
        "cognitive behavioral therapy", "social contract theory", "supply and demand",
    ),
    weight=1.8,
))

_register(DomainTemplate(
    name="artsHumanities",
    prefix="Explain the concept of ",
    suffix=_elements(
        "Conceptual definition and theoretical approaches",
        "Historical context and development",
        "Key figures, works, or movements",
        "Interpretive frameworks and methodologies",
        "Cultural significance and influence",
        "Contemporary relevance and applications",
    ),
    system_suffix=(
        "For this arts and humanities topic, balance factual information with interpretive "
        "analysis. Acknowledge diverse perspectives and cultural contexts. Reference important "
        "works, historical contexts, and influential figures. Consider both formal aspects and "
        "broader cultural significance."
    ),
    keywords=(
        "literature", "philosophy", "art", "music", "film", "theater", "religion",
        "ethics", "aesthetics", "critical theory", "cultural studies", "media studies",
        "literary theory", "art history", "musicology", "film studies", "performance studies",
        "comparative literature", "classics", "rhetoric", "semiotics", "hermeneutics",
        "existentialism", "phenomenology", "epistemology", "metaphysics", "logic",
        "moral philosophy", "political philosophy", "philosophy of mind", "philosophy of language",
    ),
    weight=1.7,
))

_register(DomainTemplate(
    name="technologyEngineering",
    prefix="Explain the engineering/technology concept of ",
    suffix=_elements(
        "Technical definition and principles",
        "Design considerations and constraints",
        "Implementation methods and materials",
        "Performance characteristics and metrics",
        "Applications and use cases",
        "Advantages, limitations, and trade-offs",
    ),
    system_suffix=(
        "For this engineering and technology topic, balance theoretical principles with "
        "practical applications. Include relevant specifications, diagrams, or equations where "
        "helpful. Connect concepts to real-world engineering challenges and technological "
        "innovations. Consider both technical and non-technical factors like cost, "
        "sustainability, and user experience."
    ),
    keywords=(
        "engineering", "mechanical", "electrical", "civil", "chemical", "aerospace",
        "biomedical", "robotics", "telecommunications", "electronics", "materials science",
        "nanotechnology", "renewable energy", "manufacturing", "industrial engineering",
        "control systems", "signal processing", "power systems", "hvac", "structural engineering",
        "geotechnical engineering", "transportation engineering", "environmental engineering",
        "petroleum engineering", "nuclear engineering", "automotive engineering", "mechatronics",
    ),
    weight=1.9,
))

_register(DomainTemplate(
    name="businessEconomics",
    prefix="Explain the business/economics concept of ",
    suffix=_elements(
        "Formal definition and theoretical framework",
        "Practical applications in business or markets",
        "Quantitative and qualitative aspects",
        "Real-world examples and case studies",
        "Strategic implications and decision-making",
        "Current trends and developments",
    ),
    system_suffix=(
        "For this business or economics topic, connect theoretical concepts with practical "
        "applications. Balance academic rigor with real-world relevance. Use examples from "
        "various industries and economic contexts. Consider both microeconomic and "
        "macroeconomic perspectives where relevant."
    ),
    keywords=(
        "business", "economics", "finance", "marketing", "management", "accounting",
        "entrepreneurship", "strategy", "operations", "supply chain", "human resources",
        "microeconomics", "macroeconomics", "econometrics", "international trade",
        "monetary policy", "fiscal policy", "market structure", "game theory",
        "corporate finance", "investment", "financial markets", "banking",
        "organizational behavior", "leadership", "project management", "business ethics",
    ),
    weight=1.7,
))

_register(DomainTemplate(
    name="healthMedicine",
    prefix="Explain the medical/health concept of ",
    suffix=_elements(
        "Medical definition and classification",
        "Physiological mechanisms or processes",
        "Diagnostic criteria and assessment methods",
        "Treatment approaches and interventions",
        "Prevention strategies and risk factors",
        "Current research and clinical guidelines",
    ),
    system_suffix=(
        "For this health or medical topic, provide evidence-based information with appropriate "
        "medical terminology. Balance technical accuracy with accessibility. Distinguish between "
        "established medical consensus and emerging research. Include relevant anatomical, "
        "physiological, or biochemical context."
    ),
    keywords=(
        "medicine", "health", "anatomy", "physiology", "pathology", "pharmacology",
        "immunology", "neurology", "cardiology", "oncology", "pediatrics",
        "psychiatry", "surgery", "radiology", "dermatology", "endocrinology",
        "gastroenterology", "hematology", "nephrology", "obstetrics", "gynecology",
        "ophthalmology", "orthopedics", "otolaryngology", "pulmonology", "rheumatology",
        "urology", "public health", "epidemiology", "biostatistics", "nutrition",
    ),
    weight=1.9,
))

_register(DomainTemplate(
    name="languageLinguistics",
    prefix="Explain the linguistic/language concept of ",
    suffix=_elements(
        "Linguistic definition and classification",
        "Structural and functional characteristics",
        "Cross-linguistic patterns and variations",
        "Historical development and etymology",
        "Examples from different languages",
        "Applications in language teaching or NLP",
    ),
    system_suffix=(
        "For this linguistics or language topic, balance theoretical frameworks with practical "
        "examples. Use appropriate linguistic terminology with clear explanations. Provide "
        "examples from diverse languages when relevant. Consider both descriptive and "
        "theoretical aspects of language."
    ),
    keywords=(
        "linguistics", "language", "grammar", "syntax", "semantics", "phonology",
        "morphology", "pragmatics", "sociolinguistics", "psycholinguistics",
        "historical linguistics", "comparative linguistics", "computational linguistics",
        "discourse analysis", "corpus linguistics", "lexicography", "etymology",
        "phonetics", "language acquisition", "bilingualism", "translation",
        "language teaching", "natural language processing", "speech recognition",
        "text analysis", "language documentation", "language revitalization",
    ),
    weight=1.8,
))

_register(DomainTemplate(
    name="educationLearning",
    prefix="Explain the educational/learning concept of ",
    suffix=_elements(
        "Educational definition and theoretical framework",
        "Learning principles and cognitive processes",
        "Implementation in educational settings",
        "Assessment and evaluation approaches",
        "Benefits and potential limitations",
        "Research evidence and best practices",
    ),
    system_suffix=(
        "For this education or learning topic, connect theory with classroom practice. Balance "
        "research findings with practical implementation strategies. Consider diverse learning "
        "contexts and student needs. Address both teacher and learner perspectives."
    ),
    keywords=(
        "education", "learning", "teaching", "pedagogy", "curriculum", "instruction",
        "assessment", "educational psychology", "educational technology", "e-learning",
        "blended learning", "differentiated instruction", "inclusive education",
        "special education", "gifted education", "early childhood education",
        "higher education", "adult education", "professional development",
        "learning theories", "constructivism", "behaviorism", "cognitivism",
        "social learning", "experiential learning", "problem-based learning",
        "project-based learning", "inquiry-based learning", "formative assessment",
    ),
    weight=1.7,
))

_register(DomainTemplate(
    name="environmentalScience",
    prefix="Explain the environmental science concept of ",
    suffix=_elements(
        "Scientific definition and ecological context",
        "Natural processes and mechanisms",
        "Human impacts and interactions",
        "Measurement and monitoring approaches",
        "Conservation and management strategies",
        "Policy implications and sustainability considerations",
    ),
    system_suffix=(
        "For this environmental science topic, integrate scientific understanding with practical "
        "implications. Balance ecological principles with human dimensions. Present "
        "evidence-based information while acknowledging areas of uncertainty. Consider both "
        "local and global perspectives."
    ),
    keywords=(
        "environmental", "ecology", "conservation", "sustainability", "biodiversity",
        "ecosystem", "climate change", "global warming", "pollution", "renewable energy",
        "carbon footprint", "carbon sequestration", "deforestation", "desertification",
        "habitat loss", "invasive species", "endangered species", "wildlife management",
        "water quality", "air quality", "soil science", "environmental policy",
        "environmental impact assessment", "environmental justice", "sustainable development",
        "circular economy", "waste management", "recycling", "natural resources",
    ),
    weight=1.8,
))

_register(DomainTemplate(
    name="dataScience",
    prefix="Explain the data science concept of ",
    suffix=_elements(
        "Technical definition and mathematical foundations",
        "Algorithms and computational methods",
        "Implementation considerations and code examples",
        "Data requirements and preprocessing steps",
        "Evaluation metrics and validation approaches",
        "Applications and use cases",
    ),
    system_suffix=(
        "For this data science topic, balance theoretical understanding with practical "
        "implementation. Include code examples or pseudocode where appropriate. Address both "
        "statistical foundations and computational aspects. Consider ethical implications of "
        "data collection and analysis when relevant."
    ),
    keywords=(
        "data science", "machine learning", "deep learning", "neural networks",
        "statistics", "data mining", "big data", "data analytics", "predictive modeling",
        "regression", "classification", "clustering", "dimensionality reduction",
        "feature engineering", "model evaluation", "cross-validation", "overfitting",
        "underfitting", "bias-variance tradeoff", "supervised learning", "unsupervised learning",
        "reinforcement learning", "natural language processing", "computer vision",
        "time series analysis", "anomaly detection", "recommendation systems",
        "data visualization", "data preprocessing", "data cleaning",
    ),
    weight=2.0,
))


def score_domains(query: str) -> Dict[str, float]:
    """
    Score every domain against a query.

    A keyword contained in the lower-cased query adds the domain weight.
    Each whitespace separated query word of four or more characters that is
    contained in a keyword adds half the weight.

    Returns:
        Mapping of domain name to score, only for domains scoring above zero
    """
    lower_query = query.lower()
    words: List[str] = lower_query.split()

    scores: Dict[str, float] = {}
    for name, template in DOMAIN_TEMPLATES.items():
        score = 0.0
        for keyword in template.keywords:
            if keyword in lower_query:
                score += template.weight
            for word in words:
                if len(word) >= MIN_PARTIAL_WORD_LENGTH and word in keyword:
                    score += template.weight * PARTIAL_MATCH_FACTOR
        if score > 0:
            scores[name] = score
    return scores


def detect_domain(query: Optional[str]) -> Optional[DomainTemplate]:
    """Best matching domain for a query, or None when nothing clears the threshold."""
    if not query:
        return None

    best_name = None
    best_score = 0.0
    # Strict comparison keeps the first declared domain on ties
    for name, score in score_domains(query).items():
        if score > best_score:
            best_name, best_score = name, score

    if best_name and best_score >= DOMAIN_SCORE_THRESHOLD:
        return DOMAIN_TEMPLATES[best_name]
    return None
