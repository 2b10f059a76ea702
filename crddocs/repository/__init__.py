"""Acquisition of the source repositories that hold CRDs."""

from .checkout import clone_repository_shallow, ensure_checkout, is_repository

__all__ = ["clone_repository_shallow", "ensure_checkout", "is_repository"]
