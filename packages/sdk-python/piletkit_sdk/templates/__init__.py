"""
Template System Module
======================

Keeps a pilet's template-managed files in sync with its base package.
"""

from .reconciler import (
    TEMPLATE_SUFFIX,
    ConfirmCallback,
    ReconcileReport,
    TemplateReconciler,
)

__all__ = [
    "TemplateReconciler",
    "ReconcileReport",
    "ConfirmCallback",
    "TEMPLATE_SUFFIX",
]
