"""Typed interfaces for categorical mapping."""

from typing import Protocol


class CategoricalMapperPort(Protocol):
    """Port definition for mapping noisy raw category codes to canonical values."""

    def mapping_map_value(self, entity_type: str, field_name: str, raw_value: str | None) -> str:
        """Map one raw categorical value to its canonical value.

        Args:
            entity_type: Entity type name.
            field_name: Categorical field name.
            raw_value: Raw source value, possibly None.

        Returns:
            str: Canonical value (never None).

        Raises:
            ConfigurationError: Raised when the field is not a configured categorical field.
        """

    def mapping_canonical_values(self, entity_type: str, field_name: str) -> tuple[str, ...]:
        """Return the finite canonical value set for one categorical field.

        Args:
            entity_type: Entity type name.
            field_name: Categorical field name.

        Returns:
            tuple[str, ...]: Canonical values including the default.

        Raises:
            ConfigurationError: Raised when the field is not a configured categorical field.
        """
