# planet_generator/layers.py

"""
A noise layer is a NoiseFilter plus the flags that decide how it takes part in
the composition performed by ShapeGenerator.
"""

from dataclasses import dataclass, field

from . import config as DEFAULTS
from .noise_filter import NoiseFilter


@dataclass
class NoiseLayer:
    """
    Attributes:
        filter (NoiseFilter): The fractal noise evaluated for this layer.
        is_warp (bool): Warp layers never add to elevation; they displace the
            sample point of the layer named by `warp_target`.
        warp_target (int): 1-based index of the layer to displace. Only
            meaningful when `is_warp` is set.
        first_layer_mask (bool): Scale this layer's contribution by how far the
            base layer rises above the sea level.
        enabled (bool): Disabled layers contribute nothing. The base layer is
            still evaluated for masking when disabled.
    """
    filter: NoiseFilter = field(default_factory=NoiseFilter)
    is_warp: bool = DEFAULTS.DEFAULT_LAYER_IS_WARP
    warp_target: int = DEFAULTS.DEFAULT_WARP_TARGET
    first_layer_mask: bool = DEFAULTS.DEFAULT_FIRST_LAYER_MASK
    enabled: bool = DEFAULTS.DEFAULT_LAYER_ENABLED

    def to_dict(self) -> dict:
        return {
            'filter': self.filter.to_dict(),
            'is_warp': self.is_warp,
            'warp_target': self.warp_target,
            'first_layer_mask': self.first_layer_mask,
            'enabled': self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "NoiseLayer":
        return cls(
            filter=NoiseFilter.from_dict(data.get('filter', {})),
            is_warp=bool(data.get('is_warp', DEFAULTS.DEFAULT_LAYER_IS_WARP)),
            warp_target=int(data.get('warp_target', DEFAULTS.DEFAULT_WARP_TARGET)),
            first_layer_mask=bool(data.get('first_layer_mask', DEFAULTS.DEFAULT_FIRST_LAYER_MASK)),
            enabled=bool(data.get('enabled', DEFAULTS.DEFAULT_LAYER_ENABLED)),
        )
