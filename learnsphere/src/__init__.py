"""LearnSphere REST API package."""
