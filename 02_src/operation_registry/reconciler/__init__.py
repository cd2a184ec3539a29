"""Reconciler module."""

from .reconciler import IReconciler, Reconciler, parse_manifest

__all__ = ["IReconciler", "Reconciler", "parse_manifest"]
