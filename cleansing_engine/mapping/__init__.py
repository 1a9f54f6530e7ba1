"""Mapping layer package for raw-to-canonical categorical values."""

from .interfaces import CategoricalMapperPort
from .service import CategoricalMapper, mapping_map_with_table

__all__ = [
	"CategoricalMapper",
	"CategoricalMapperPort",
	"mapping_map_with_table",
]
