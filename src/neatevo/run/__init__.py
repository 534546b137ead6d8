"""
NEAT Run Package

Modules:
    config:  Config class (immutable configuration parameters)
    trainer: Trainer class (the generational state machine)
"""

from neatevo.run.config  import Config
from neatevo.run.trainer import Phase, Trainer

__all__ = ['Config',
           'Phase',
           'Trainer']
