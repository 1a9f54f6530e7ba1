"""Field normalization and validation engine for warehouse cleansing layers."""
