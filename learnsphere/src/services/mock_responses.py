"""
Canned answers served when no Sonar API key is configured.

Lets the API run end to end in development and tests without network
access. Lookups try an exact (case-insensitive) match against the canned
queries first, then the canned query sharing the most words with the
question, then a generic answer.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from learnsphere.src.models.learning import Citation, LearningResponse


@dataclass(frozen=True)
class CannedAnswer:
    query: str
    content: str
    citations: Tuple[Tuple[str, str, str], ...]
    follow_up_questions: Tuple[str, ...] = field(default_factory=tuple)

    def to_response(self) -> LearningResponse:
        return LearningResponse(
            content=self.content,
            citations=[Citation(title=t, url=u, snippet=s) for t, u, s in self.citations],
            follow_up_questions=list(self.follow_up_questions),
        )


CANNED_ANSWERS: Tuple[CannedAnswer, ...] = (
    CannedAnswer(
        query="What is machine learning?",
        content="""# Machine Learning

Machine learning is a branch of artificial intelligence (AI) and computer science that uses data and algorithms to imitate the way humans learn, gradually improving its accuracy.

## Key Concepts

Machine learning algorithms build a model from sample data, known as "training data", to make predictions or decisions without being explicitly programmed to do so.

## Types of Machine Learning

1. **Supervised Learning**: The algorithm is trained on labeled examples and learns to predict the label from the input.
2. **Unsupervised Learning**: The algorithm receives unlabeled data and finds structure in it on its own.
3. **Reinforcement Learning**: The algorithm learns by interacting with an environment and maximizing the reward it receives.

## Applications

- **Healthcare**: Disease identification, patient monitoring
- **Finance**: Fraud detection, risk assessment
- **Transportation**: Self-driving cars, traffic prediction
- **Marketing**: Customer segmentation, recommendation systems
- **Natural Language Processing**: Translation, sentiment analysis

## Challenges

- **Data Quality**: Models are only as good as the data they are trained on
- **Interpretability**: Many models are "black boxes"
- **Bias**: Models can amplify biases present in training data
- **Computational Resources**: Training large models needs significant computing power""",
        citations=(
            (
                "Machine Learning - Wikipedia",
                "https://en.wikipedia.org/wiki/Machine_learning",
                "Machine learning (ML) is a field of study in artificial intelligence concerned with "
                "statistical algorithms that can learn from data and generalize to unseen data.",
            ),
            (
                "What is Machine Learning? | IBM",
                "https://www.ibm.com/topics/machine-learning",
                "Machine learning is a branch of artificial intelligence (AI) and computer science which "
                "focuses on the use of data and algorithms to imitate the way that humans learn.",
            ),
            (
                "Machine Learning: What it is and why it matters | SAS",
                "https://www.sas.com/en_us/insights/analytics/machine-learning.html",
                "Machine learning is a method of data analysis that automates analytical model building.",
            ),
        ),
        follow_up_questions=(
            "What's the difference between AI and machine learning?",
            "How do neural networks work?",
            "What skills do I need to learn machine learning?",
            "What are some real-world examples of machine learning applications?",
        ),
    ),
    CannedAnswer(
        query="What's the difference between AI and machine learning?",
        content="""# Difference Between AI and Machine Learning

Artificial Intelligence (AI) and Machine Learning (ML) are related fields with distinct scope.

## Artificial Intelligence

AI is the broader idea of machines carrying out tasks we would consider intelligent, such as visual perception, speech recognition, decision-making and translation.

1. **Narrow or Weak AI**: Designed for a specific task
2. **General or Strong AI**: Systems with generalized human cognitive abilities

## Machine Learning

Machine learning is a subset of AI focused on algorithms that learn from data instead of following explicitly programmed instructions.

## The Relationship

- **AI** is the broad concept of machines mimicking human intelligence
- **Machine Learning** is one approach to achieving AI
- **Deep Learning** is a subset of ML that uses many-layered neural networks

All machine learning is AI, but not all AI is machine learning.

## Examples

- **AI without ML**: Rule-based systems such as early chess programs
- **ML as AI**: Recommendation systems that learn from your behavior
- **Beyond both**: Robotics combining ML with other AI techniques""",
        citations=(
            (
                "Artificial Intelligence vs. Machine Learning - What's the Difference? | IBM",
                "https://www.ibm.com/cloud/blog/ai-vs-machine-learning-vs-deep-learning-vs-neural-networks",
                "Machine learning is a subset of AI which allows a machine to automatically learn from "
                "past data without programming explicitly.",
            ),
            (
                "What's the Difference Between AI, ML, and Deep Learning? | NVIDIA Blog",
                "https://blogs.nvidia.com/blog/2016/07/29/whats-difference-artificial-intelligence-machine-learning-deep-learning-ai/",
                "AI is the broadest term. Machine learning is a subset of AI, and deep learning is a "
                "subset of machine learning.",
            ),
            (
                "Artificial Intelligence vs. Machine Learning: Understanding the Differences | Coursera",
                "https://www.coursera.org/articles/ai-vs-machine-learning",
                "Machine learning is a specific subset of AI that trains a machine how to learn using data.",
            ),
        ),
        follow_up_questions=(
            "What are the ethical concerns with AI?",
            "How is deep learning different from machine learning?",
            "What programming languages are best for AI development?",
            "What are the limitations of current AI systems?",
        ),
    ),
    CannedAnswer(
        query="Explain quantum computing",
        content="""# Quantum Computing

Quantum computing harnesses quantum mechanics to perform calculations in ways classical computers cannot.

## Fundamental Principles

1. **Qubits**: Unlike bits, qubits can exist in a superposition of 0 and 1.
2. **Superposition**: n qubits can represent 2^n states at once.
3. **Entanglement**: The state of one qubit can be correlated with another regardless of distance.
4. **Interference**: Algorithms amplify correct answers and cancel wrong ones.

## Applications

- **Cryptography**: Breaking current encryption and designing quantum-resistant schemes
- **Drug Discovery**: Simulating molecular structures
- **Optimization**: Logistics, financial modeling and resource allocation
- **Material Science**: Designing materials with specific properties

## Challenges

- **Decoherence**: Quantum states are fragile
- **Error Correction**: Correcting errors without disturbing the computation
- **Scalability**: Building systems with enough stable qubits""",
        citations=(
            (
                "Quantum computing - Wikipedia",
                "https://en.wikipedia.org/wiki/Quantum_computing",
                "Quantum computing is a type of computation whose operations can harness the phenomena "
                "of quantum mechanics, such as superposition, interference, and entanglement.",
            ),
            (
                "What is quantum computing? | IBM",
                "https://www.ibm.com/topics/quantum-computing",
                "Quantum computing harnesses the laws of quantum mechanics to solve problems too "
                "complex for classical computers.",
            ),
            (
                "Quantum Computing: Progress and Prospects (2019) | The National Academies Press",
                "https://www.nap.edu/catalog/25196/quantum-computing-progress-and-prospects",
                "Quantum computing is the use of quantum phenomena such as superposition and "
                "entanglement to perform computation.",
            ),
        ),
        follow_up_questions=(
            "How do quantum computers use entanglement?",
            "What is quantum supremacy?",
            "What are the best languages for quantum computing?",
            "When will quantum computers become mainstream?",
        ),
    ),
    CannedAnswer(
        query="How does photosynthesis work?",
        content="""# Photosynthesis: Converting Light Energy to Chemical Energy

Photosynthesis is the process by which plants, algae and some bacteria convert light energy into chemical energy stored as sugars.

## The Basic Equation

```
6CO2 + 6H2O + Light Energy -> C6H12O6 + 6O2
```

## The Two Main Stages

### 1. Light-Dependent Reactions

Take place in the thylakoid membranes: pigments absorb light, water is split releasing oxygen, and ATP and NADPH are produced.

### 2. Calvin Cycle

Takes place in the stroma: carbon dioxide is fixed and reduced to glucose using ATP and NADPH.

## Factors Affecting Photosynthesis

- **Light Intensity**
- **Carbon Dioxide Concentration**
- **Temperature**
- **Water Availability**

## Variations

- **C3**: The most common pathway
- **C4**: An adaptation to hot, dry environments
- **CAM**: Used by succulents, collecting CO2 at night""",
        citations=(
            (
                "Photosynthesis - Wikipedia",
                "https://en.wikipedia.org/wiki/Photosynthesis",
                "Photosynthesis is a process used by plants and other organisms to convert light "
                "energy into chemical energy.",
            ),
            (
                "Photosynthesis | National Geographic Society",
                "https://www.nationalgeographic.org/encyclopedia/photosynthesis/",
                "Photosynthesis is the process by which plants use sunlight, water, and carbon dioxide "
                "to create oxygen and energy in the form of sugar.",
            ),
            (
                "Photosynthesis - Biology LibreTexts",
                "https://bio.libretexts.org/Bookshelves/Introductory_and_General_Biology",
                "The light-dependent reactions of photosynthesis convert light energy into chemical "
                "energy, producing ATP and NADPH.",
            ),
        ),
        follow_up_questions=(
            "What's the difference between C3 and C4 photosynthesis?",
            "How do plants adapt photosynthesis to different environments?",
            "Why are some plants green and others different colors?",
            "How does artificial photosynthesis work?",
        ),
    ),
    CannedAnswer(
        query="Explain the theory of relativity",
        content="""# Theory of Relativity

Albert Einstein's theory of relativity comprises Special Relativity (1905) and General Relativity (1915).

## Special Relativity

1. **The Principle of Relativity**: The laws of physics are the same for all observers in uniform motion.
2. **The Constancy of the Speed of Light**: Light in a vacuum travels at the same speed for every observer.

Consequences include time dilation, length contraction, mass-energy equivalence (E=mc²) and the relativity of simultaneity.

## General Relativity

Gravity is the curvature of spacetime caused by mass and energy. It predicts gravitational time dilation, gravitational lensing and gravitational waves.

## Experimental Confirmations

- **Bending of Light** observed during the 1919 solar eclipse
- **Mercury's Orbit** anomalies explained
- **GPS Satellites** correcting for relativistic effects
- **Gravitational Waves** detected by LIGO in 2015

## Limitations

Relativity does not integrate with quantum mechanics and breaks down at singularities.""",
        citations=(
            (
                "Theory of relativity - Wikipedia",
                "https://en.wikipedia.org/wiki/Theory_of_relativity",
                "The theory of relativity usually encompasses two interrelated theories by Albert "
                "Einstein: special relativity and general relativity.",
            ),
            (
                "What Is the Theory of Relativity? | Space",
                "https://www.space.com/17661-theory-general-relativity.html",
                "The theory of relativity describes the relationship between space and time.",
            ),
            (
                "Einstein's Theory of General Relativity | Space.com",
                "https://www.space.com/17661-theory-general-relativity.html",
                "General relativity is Einstein's understanding of how gravity affects the fabric of "
                "space-time.",
            ),
        ),
        follow_up_questions=(
            "How does relativity affect time travel possibilities?",
            "What is the twin paradox in special relativity?",
            "How do black holes relate to Einstein's theories?",
            "What is the relationship between relativity and quantum mechanics?",
        ),
    ),
)

DEFAULT_FOLLOW_UPS = [
    "Can you explain the basic principles of this topic?",
    "What are the most important concepts to understand first?",
    "Who are the leading experts in this field?",
    "What are some practical applications of this knowledge?",
]


def find_canned_answer(query: str) -> Optional[CannedAnswer]:
    """Exact match first, then the canned query sharing the most long words."""
    lower_query = query.lower()
    for answer in CANNED_ANSWERS:
        if answer.query.lower() == lower_query:
            return answer

    words = lower_query.split(" ")
    best_match = None
    highest_score = 0
    for answer in CANNED_ANSWERS:
        answer_words = answer.query.lower().split(" ")
        score = sum(1 for word in words if len(word) > 3 and word in answer_words)
        if score > highest_score:
            best_match, highest_score = answer, score

    return best_match


def default_response(query: str) -> LearningResponse:
    topic = " ".join(query.split(" ")[-3:])
    content = f"""# Response to: "{query}"

I don't have specific information about this topic in my knowledge base. Here's some general guidance:

## Understanding the Topic

This appears to be a question about {topic}. To learn more about this subject, you might want to:

1. **Research Basic Concepts**: Start with fundamental principles related to this topic
2. **Explore Related Fields**: Look into connected areas of study
3. **Find Authoritative Sources**: Seek information from academic journals, textbooks, or recognized experts

## Learning Approach

When learning about a new topic:

- Begin with introductory materials
- Build a foundation of key terminology
- Progress to more complex concepts
- Apply critical thinking to evaluate information

Would you like to ask about a different topic or rephrase your question?"""

    return LearningResponse(
        content=content,
        citations=[Citation(
            title="General Knowledge Resources",
            url="https://www.wikipedia.org",
            snippet=(
                "Wikipedia is a free online encyclopedia that allows users to access "
                "information on a wide variety of topics."
            ),
        )],
        follow_up_questions=list(DEFAULT_FOLLOW_UPS),
    )


def get_mock_response(query: str) -> LearningResponse:
    """Canned answer for a query (always returns something)."""
    answer = find_canned_answer(query)
    if answer is not None:
        return answer.to_response()
    return default_response(query)


def topic_slug(topic: str) -> str:
    return re.sub(r"\s+", "-", topic.lower())


def generate_mock_learning_path(topic: str, level: str = "intermediate") -> LearningResponse:
    """Staged learning path for any topic."""
    slug = topic_slug(topic)
    stages: List[Tuple[str, str, List[str], List[str]]] = [
        (
            f"Fundamentals of {topic}",
            f"Start by understanding the basic concepts that form the foundation of {topic}.",
            [
                f"Understand the definition and scope of {topic}",
                "Learn the historical context and development",
                "Identify key figures and their contributions",
                "Grasp the fundamental principles",
            ],
            [
                f"Introductory textbooks on {topic}",
                "Online courses covering the basics",
                "Educational videos explaining core concepts",
            ],
        ),
        (
            "Intermediate Concepts",
            f"Once you have a solid foundation, move on to more complex aspects of {topic}.",
            [
                "Analyze the relationships between different components",
                "Apply theoretical knowledge to simple problems",
                f"Develop critical thinking about {topic}",
            ],
            [
                "Advanced textbooks and academic papers",
                "Case studies and practical examples",
                "Community forums and discussion groups",
            ],
        ),
        (
            "Advanced Applications",
            "At this stage, focus on applying your knowledge to real-world situations.",
            [
                f"Solve complex problems related to {topic}",
                "Evaluate current trends and future directions",
                f"Connect {topic} to other fields of knowledge",
            ],
            [
                "Specialized academic journals",
                "Industry reports and case studies",
                "Hands-on projects and experiments",
            ],
        ),
        (
            "Mastery and Specialization",
            f"Finally, choose a specific area within {topic} to develop deeper expertise.",
            [
                "Develop specialized knowledge in a sub-field",
                "Stay current with cutting-edge research",
                "Connect with experts and communities",
            ],
            [
                "Cutting-edge research papers",
                "Professional networks and conferences",
                "Continuing education opportunities",
            ],
        ),
    ]

    sections = [
        f"# Learning Path: {topic}",
        "",
        f"## Introduction to {topic}",
        f"This learning path will guide you through understanding {topic} from the fundamentals "
        f"to advanced concepts. This path is designed for {level} learners.",
    ]
    for title, summary, objectives, resources in stages:
        sections += ["", f"## {title}", summary, "", "### Learning Objectives:"]
        sections += [f"- {item}" for item in objectives]
        sections += ["", "### Resources:"]
        sections += [f"- {item}" for item in resources]
    sections += [
        "",
        "## Assessment and Progress Tracking",
        "Throughout your learning journey, regularly assess your understanding:",
        "",
        "- Create concept maps connecting ideas",
        "- Explain concepts to others in your own words",
        "- Apply knowledge to solve increasingly complex problems",
        "- Reflect on your learning process and adjust as needed",
    ]

    return LearningResponse(
        content="\n".join(sections),
        citations=[
            Citation(
                title=f"Introduction to {topic} - Educational Resource",
                url=f"https://example.com/intro-to-{slug}",
                snippet=(
                    f"A comprehensive introduction to {topic} covering fundamental concepts, "
                    "historical context, and basic principles."
                ),
            ),
            Citation(
                title=f"{topic} for {level.capitalize()} Learners",
                url=f"https://example.com/{slug}-{level}-guide",
                snippet=(
                    f"A structured approach to learning {topic} designed for {level} learners."
                ),
            ),
        ],
    )
