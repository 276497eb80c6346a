"""
Layer registry: the host boundary the replay driver talks to.

Layers are groups of entities keyed by id. Replay-capable layers own an
EntityReconciler and accept deltas; plain layers only carry visibility.
"""

import logging
from typing import Optional

from track_replay.shared.protocol import Delta

from .reconciler import EntityReconciler

logger = logging.getLogger(__name__)


class Layer:
    """A named, toggleable group."""

    def __init__(self, layer_id: str, title: Optional[str] = None, visible: bool = True):
        self.layer_id = layer_id
        self.title = title or layer_id
        self.visible = visible

    @property
    def replay_capable(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {
            "id": self.layer_id,
            "title": self.title,
            "visible": self.visible,
            "replay_capable": self.replay_capable,
        }


class EntityLayer(Layer):
    """Layer whose entities are driven by deltas."""

    def __init__(
        self,
        layer_id: str,
        reconciler: EntityReconciler,
        title: Optional[str] = None,
        visible: bool = True,
    ):
        super().__init__(layer_id, title=title, visible=visible)
        self.reconciler = reconciler

    @property
    def replay_capable(self) -> bool:
        return True

    def apply(self, delta: Delta):
        self.reconciler.apply(delta)

    def clear(self):
        self.reconciler.clear()

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["entity_count"] = len(self.reconciler)
        return data


class LayerRegistry:
    """
    Caller-owned map of layers.

    Lookups by unknown id are no-ops; registering the same id twice is a
    programming error and raises.
    """

    def __init__(self):
        self._layers: dict[str, Layer] = {}

    def register_layer(self, layer: Layer):
        if layer.layer_id in self._layers:
            raise ValueError(f"Layer exists: {layer.layer_id}")
        self._layers[layer.layer_id] = layer
        logger.info(f"Registered layer {layer.layer_id} (replay={layer.replay_capable})")

    def get_layer(self, layer_id: str) -> Optional[Layer]:
        return self._layers.get(layer_id)

    def list_layers(self) -> list[Layer]:
        return list(self._layers.values())

    def set_layer_visible(self, layer_id: str, visible: bool):
        layer = self._layers.get(layer_id)
        if layer is None:
            return
        layer.visible = visible

    def toggle_layer(self, layer_id: str):
        layer = self._layers.get(layer_id)
        if layer is None:
            return
        self.set_layer_visible(layer_id, not layer.visible)

    def apply_to_layer(self, layer_id: str, delta: Delta):
        layer = self._layers.get(layer_id)
        if isinstance(layer, EntityLayer):
            layer.apply(delta)

    def clear_all_replay_capable_layers(self):
        for layer in self._layers.values():
            if isinstance(layer, EntityLayer):
                layer.clear()
