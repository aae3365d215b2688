"""Shared utilities for the LearnSphere service and its scripts."""
