"""Business logic for authentication, prompt construction and learning flows."""
