"""
Action catalog for the IdleLoops predictor.

Action definitions, tagged effect/loop descriptors and the stock library.
"""

from .catalog import (
    ActionCatalog,
    ActionDefinition,
    ActionDescriptor,
    ActionKind,
    ConfigurationError,
    LoopContext,
    LoopDescriptor,
    build_catalog,
)

from .library import PREDICTIONS

__all__ = [
    'ActionCatalog',
    'ActionDefinition',
    'ActionDescriptor',
    'ActionKind',
    'ConfigurationError',
    'LoopContext',
    'LoopDescriptor',
    'build_catalog',
    'PREDICTIONS',
]
