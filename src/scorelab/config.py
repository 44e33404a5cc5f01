"""Engine defaults and the analysis method catalogue.

Each catalogue entry defines:
    id: stable method identifier used in saved chains
    name: display name
    short_description: one-line summary for method pickers
    description: longer explanation shown next to the step form
"""

DEFAULT_ANALYSIS_WEIGHT = 1.0

NUMERIC_DATA_TYPES = frozenset({"numeric", "percent", "ratio", "currency"})
BOOLEAN_DATA_TYPES = frozenset({"boolean"})

SCALING_CURVES = ("linear", "quadratic", "exponential", "logarithmic")
DEFAULT_SLOPES = {"linear": 1.0, "exponential": 2.0, "logarithmic": 1.0}

DEFAULT_BUCKETS = 5
MIN_BUCKETS = 2

DEFAULT_SIGNIFICANCE_LEVEL = 95.0
SIGNIFICANCE_LEVEL_BOUNDS = (0.01, 99.99)

OPERATORS = ("+", "-", "*", "/")

method_catalogue = [
    {
        "id": "bell-curve-distance",
        "name": "Bell curve anomaly score",
        "short_description": "Highlights outliers by measuring log-scaled distance from the mean.",
        "description": (
            "Creates a bell curve from the column values and scores each row based on how far "
            "it sits from the centre. The furthest values converge to 1, while typical values "
            "stay near 0."
        ),
    },
    {
        "id": "conditional-flag",
        "name": "Conditional statement",
        "short_description": "Outputs 1 when a custom rule is true for the row, otherwise 0.",
        "description": (
            "Define a true/false check for the selected column. You can match a specific value, "
            "interpret boolean text, or set a numeric threshold/range. Rows that satisfy the "
            "condition receive a score of 1, while the rest receive 0."
        ),
    },
    {
        "id": "one-sided-distance",
        "name": "One-sided distance",
        "short_description": "Rewards values on one side of a baseline, ramping up to the extreme.",
        "description": (
            "Pick a baseline (column average, median or a custom value) and a side. Rows beyond "
            "the baseline on that side score between 0 and 1 depending on how close they are to "
            "the most extreme value; rows on the other side score 0."
        ),
    },
    {
        "id": "zero-to-one-scaling",
        "name": "Zero-to-one scaling",
        "short_description": "Rescales the column so the minimum is 0 and the maximum is 1.",
        "description": (
            "Applies min-max normalisation to the column. Use exponential scaling to compress "
            "the lower end of the range."
        ),
    },
    {
        "id": "distribution-density",
        "name": "Distribution density",
        "short_description": "Scores rows by how crowded their part of the distribution is.",
        "description": (
            "Splits the column range into equal-width buckets and scores each row by the "
            "population of its bucket, rewarding either the rarest or the most common values."
        ),
    },
    {
        "id": "significance-flag",
        "name": "Significance flag",
        "short_description": "Flags values that fall within the significance threshold.",
        "description": (
            "Compares each value with the configured significance level and outputs 1 for "
            "significant rows (or for non-significant rows when inverted)."
        ),
    },
]

__all__ = [
    "BOOLEAN_DATA_TYPES",
    "DEFAULT_ANALYSIS_WEIGHT",
    "DEFAULT_BUCKETS",
    "DEFAULT_SIGNIFICANCE_LEVEL",
    "DEFAULT_SLOPES",
    "MIN_BUCKETS",
    "NUMERIC_DATA_TYPES",
    "OPERATORS",
    "SCALING_CURVES",
    "SIGNIFICANCE_LEVEL_BOUNDS",
    "method_catalogue",
]
