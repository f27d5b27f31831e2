"""
Configuration Management
========================

Configuration utilities for the DVB-I validators.
"""

from dvbi_core.config.settings import (
    ValidatorConfig,
    ReferenceDataConfig,
    SchemaConfig,
    VocabularySource,
    default_vocabularies,
    load_config,
    save_config,
    get_default_config,
    configure_logging,
)

__all__ = [
    "ValidatorConfig",
    "ReferenceDataConfig",
    "SchemaConfig",
    "VocabularySource",
    "default_vocabularies",
    "load_config",
    "save_config",
    "get_default_config",
    "configure_logging",
]
