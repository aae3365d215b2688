"""LearnSphere: AI-assisted learning API backed by Perplexity Sonar."""

__version__ = "1.0.0"
