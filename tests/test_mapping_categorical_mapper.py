"""Regression tests for configured categorical code mapping."""

from __future__ import annotations

import pytest

from cleansing_engine.config import config_load_rule_set
from cleansing_engine.domain import CategoricalMappingEntry, CategoricalMappingTable, ConfigurationError, TextNormalizer
from cleansing_engine.mapping import CategoricalMapper, mapping_map_with_table


def _build_mapper() -> CategoricalMapper:
    """Create a mapper over the bundled warehouse rule set.

    Returns:
        CategoricalMapper: Mapper with bundled mapping tables.

    Raises:
        ConfigurationError: Raised when the bundled rule set is invalid.
    """

    return CategoricalMapper(rule_set=config_load_rule_set())


@pytest.mark.parametrize(
    ("raw_value", "expected"),
    [
        ("F", "Female"),
        (" female ", "Female"),
        ("M", "Male"),
        ("MALE\r", "Male"),
        ("X", "n/a"),
        ("", "n/a"),
        (None, "n/a"),
    ],
)
def test_mapping_map_value_resolves_gender_codes(raw_value: str | None, expected: str) -> None:
    """Map gender codes case-insensitively after normalization with a default fallback.

    Args:
        raw_value: Raw gender value.
        expected: Expected canonical value.

    Returns:
        None: Assertions validate mapped values.

    Raises:
        AssertionError: Raised when mapping output is incorrect.
    """

    assert _build_mapper().mapping_map_value("erp_cust_az12", "gen", raw_value) == expected


def test_mapping_map_value_distinguishes_same_code_across_tables() -> None:
    """Resolve the same raw code differently per field mapping table.

    Returns:
        None: Assertions validate per-field table resolution.

    Raises:
        AssertionError: Raised when tables are mixed up.
    """

    mapper = _build_mapper()

    assert mapper.mapping_map_value("crm_cust_info", "cst_gndr", "M") == "Male"
    assert mapper.mapping_map_value("crm_cust_info", "cst_marital_status", "M") == "Married"
    assert mapper.mapping_map_value("crm_prd_info", "prd_line", "M") == "Mountain"
    assert mapper.mapping_map_value("crm_prd_info", "prd_line", "s") == "Other Sales"


def test_mapping_map_value_passes_through_unmatched_countries() -> None:
    """Emit normalized unmatched input for passthrough tables but default blanks.

    Returns:
        None: Assertions validate passthrough behavior.

    Raises:
        AssertionError: Raised when passthrough behavior is incorrect.
    """

    mapper = _build_mapper()

    assert mapper.mapping_map_value("erp_loc_a101", "cntry", "DE") == "Germany"
    assert mapper.mapping_map_value("erp_loc_a101", "cntry", " usa") == "United States"
    assert mapper.mapping_map_value("erp_loc_a101", "cntry", " France ") == "France"
    assert mapper.mapping_map_value("erp_loc_a101", "cntry", "  ") == "n/a"
    assert mapper.mapping_map_value("erp_loc_a101", "cntry", None) == "n/a"


def test_mapping_map_value_is_total_over_canonical_set() -> None:
    """Return a canonical value for every input of a non-passthrough table.

    Returns:
        None: Assertions validate mapper totality.

    Raises:
        AssertionError: Raised when a value outside the canonical set is returned.
    """

    mapper = _build_mapper()
    canonical_values = mapper.mapping_canonical_values("crm_cust_info", "cst_marital_status")

    assert canonical_values == ("Single", "Married", "n/a")
    for raw_value in ("S", "m", "divorced", "", None, " S ", "123"):
        assert mapper.mapping_map_value("crm_cust_info", "cst_marital_status", raw_value) in canonical_values


def test_mapping_map_with_table_uses_first_matching_entry() -> None:
    """Return the first declared entry when match sets overlap.

    Returns:
        None: Assertions validate entry precedence.

    Raises:
        AssertionError: Raised when a later entry wins.
    """

    table = CategoricalMappingTable(
        name="status",
        entries=(
            CategoricalMappingEntry(match_values=frozenset({"A", "ACTIVE"}), canonical_value="Active"),
            CategoricalMappingEntry(match_values=frozenset({"A"}), canonical_value="Archived"),
            CategoricalMappingEntry(match_values=frozenset({""}), canonical_value="Unknown"),
        ),
        default_value="Other",
    )
    normalizer = TextNormalizer()

    assert mapping_map_with_table(table, "a", normalizer) == "Active"
    assert mapping_map_with_table(table, None, normalizer) == "Unknown"
    assert mapping_map_with_table(table, "Z", normalizer) == "Other"


def test_mapping_map_value_rejects_unconfigured_fields() -> None:
    """Raise ConfigurationError for fields without a categorical mapping.

    Returns:
        None: Assertions validate lookup guard behavior.

    Raises:
        AssertionError: Raised when unconfigured fields are accepted.
    """

    mapper = _build_mapper()

    with pytest.raises(ConfigurationError):
        mapper.mapping_map_value("crm_cust_info", "cst_firstname", "Jon")
    with pytest.raises(ConfigurationError):
        mapper.mapping_canonical_values("unknown_entity", "gen")
