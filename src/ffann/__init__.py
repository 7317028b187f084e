"""Random fully-connected feedforward networks: construction and inference"""

import importlib.metadata

from .core.functions import Activation
from .core.ann import Network, RawValue, Unit
from .core.config import Config
from .core.render import plotly_render, NetworkMonitor

try:  # pragma: no cover
    # __package__ allows for the case where __name__ is "__main__"
    __version__ = importlib.metadata.version(__package__ or __name__)
except importlib.metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"


__all__ = ['Network', 'RawValue', 'Unit',
           'Activation',
           'Config',
           'plotly_render', 'NetworkMonitor']
