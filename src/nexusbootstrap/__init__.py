"""
nexus-bootstrap - Portal identity and reference data provisioning
"""

__version__ = "0.1.0"

from .core import BootstrapOrchestrator
from .errors import BootstrapError

__all__ = ["BootstrapOrchestrator", "BootstrapError"]
