"""
Tag Validation Package
======================

Declarative per-field validation driven by string metadata attached to record
fields. Each metadata entry names a rule ("max", "required", ...) and an
optional argument; failures are collected as human-readable messages.

Package Structure:
- config: environment-driven settings (python-dotenv)
- monitoring: structlog logging setup
- validation: tag parsing, field contexts, rule registry, dispatch, rules
"""

__version__ = "1.0.0"
__title__ = "tag-validation"
__description__ = "Declarative tag-driven field validation engine"

PACKAGE_NAME = "tagvalidation"
