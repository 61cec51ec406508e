"""
namecloud - Point Namecheap domains at Cloudflare

A small utility that creates Cloudflare zones for Namecheap domains, points
their nameservers at Cloudflare, and transfers them to Cloudflare Registrar.
"""

__version__ = "1.0.0"
__author__ = "namecloud developers"
__description__ = "Point Namecheap domains at Cloudflare and transfer them"

from .core.context import ClientContext, bootstrap
from .core.point import PointWorkflow
from .core.transfer import TransferWorkflow

__all__ = [
    "ClientContext",
    "bootstrap",
    "PointWorkflow",
    "TransferWorkflow",
]
