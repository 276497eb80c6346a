# Entity layers and reconciliation
from .reconciler import EntityReconciler
from .registry import Layer, EntityLayer, LayerRegistry

__all__ = [
    "EntityReconciler",
    "Layer",
    "EntityLayer",
    "LayerRegistry",
]
