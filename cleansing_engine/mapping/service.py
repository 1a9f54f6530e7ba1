"""Categorical mapping service for raw-to-canonical code standardization."""

from __future__ import annotations

from cleansing_engine.domain import CategoricalMappingTable, ConfigurationError, FieldType, RuleSet, TextNormalizer


class CategoricalMapper:
    """Concrete mapper driven by the configured categorical mapping tables."""

    def __init__(self, rule_set: RuleSet, normalizer: TextNormalizer | None = None):
        """Initialize categorical mapper.

        Args:
            rule_set: Validated rule set holding entity specs and mapping tables.
            normalizer: Optional normalizer. Defaults to the default strip set.

        Raises:
            ConfigurationError: Raised when a categorical field references an undefined mapping.
        """

        tables_by_field: dict[tuple[str, str], CategoricalMappingTable] = {}
        for entity_type, entity_spec in rule_set.entities.items():
            for field_spec in entity_spec.fields:
                if field_spec.field_type is not FieldType.CATEGORICAL:
                    continue
                table = rule_set.mappings.get(field_spec.mapping_name or "")
                if table is None:
                    raise ConfigurationError(
                        f"entity {entity_type} field {field_spec.name} references undefined mapping "
                        f"{field_spec.mapping_name}"
                    )
                tables_by_field[(entity_type, field_spec.name)] = table

        self._tables_by_field = tables_by_field
        self._normalizer = normalizer or TextNormalizer()

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

        table = self._mapping_resolve_table(entity_type, field_name)
        return mapping_map_with_table(table, raw_value, self._normalizer)

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

        return self._mapping_resolve_table(entity_type, field_name).mapping_table_canonical_values()

    def _mapping_resolve_table(self, entity_type: str, field_name: str) -> CategoricalMappingTable:
        table = self._tables_by_field.get((entity_type, field_name))
        if table is None:
            raise ConfigurationError(f"entity {entity_type} field {field_name} is not a configured categorical field")
        return table


def mapping_map_with_table(
    table: CategoricalMappingTable,
    raw_value: str | None,
    normalizer: TextNormalizer,
) -> str:
    """Map one raw value through one mapping table.

    Entries are checked in declared order and the first matching match-set
    wins. Null input is looked up as an empty string so a table can match
    blanks explicitly; otherwise it falls back to the default like any other
    unmatched value. Passthrough never applies to blank input.

    Args:
        table: Categorical mapping table.
        raw_value: Raw source value, possibly None.
        normalizer: Shared text normalizer.

    Returns:
        str: Canonical value.
    """

    normalized_text = normalizer.domain_text_normalize_for_comparison(raw_value)
    comparison_value = normalized_text.comparison if normalized_text is not None else ""

    for entry in table.entries:
        if comparison_value in entry.match_values:
            return entry.canonical_value

    if table.passthrough_unmatched and normalized_text is not None and normalized_text.display:
        return normalized_text.display
    return table.default_value


__all__ = ["CategoricalMapper", "mapping_map_with_table"]
