"""
Infrastructure Package
======================

Provides abstraction layers for external dependencies following the Dependency Inversion Principle.

Modules:
    - events: Event bus abstraction (Redis pub/sub, in-memory)
    - notifications: Notification service abstraction (event bus, mock)
    - container: Composition root wiring repositories and services

This package enables:
    - Easy testing with mock implementations
    - Switching between providers without code changes
"""
