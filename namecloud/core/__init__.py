"""
Core workflows.

This package contains client bootstrap and the point and transfer workflows.
"""

from .context import ClientContext, bootstrap
from .point import PointWorkflow
from .transfer import TransferWorkflow

__all__ = ["ClientContext", "bootstrap", "PointWorkflow", "TransferWorkflow"]
