"""
Workshop Kernel

Shared infrastructure for the service order engine:
- Database base classes, engine and transactional session scope
- Structured JSON logging
- Typed exception hierarchy
- Deterministic clock, workflow value objects and the operation context
"""

__version__ = "0.1.0"
