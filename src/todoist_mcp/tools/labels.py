"""
Label expression builder.

Turns a list of label names into a fragment of the Todoist filter language.
"""

from __future__ import annotations

from typing import Optional, Sequence

from todoist_mcp.constants import LabelsOperator

# The filter parser expects the operator padded with two spaces on each side
_FILTER_JOINERS = {
    LabelsOperator.AND: "  &  ",
    LabelsOperator.OR: "  |  ",
}


def _normalize_label(label: str) -> str:
    return label[1:] if label.startswith("@") else label


def generate_labels_filter(
    labels: Optional[Sequence[str]],
    operator: LabelsOperator | str = LabelsOperator.OR,
) -> str:
    """
    Build a parenthesized label filter.

    Args:
        labels: Label names, with or without a leading ``@``
        operator: ``and`` to require every label, ``or`` to require any

    Returns:
        A fragment such as ``(@work  &  @urgent)``, or an empty string
        when no labels are given.

    Examples:
        >>> generate_labels_filter(["work"])
        '(@work)'
        >>> generate_labels_filter(["@work", "urgent"], "and")
        '(@work  &  @urgent)'
    """
    if not labels:
        return ""
    joiner = _FILTER_JOINERS[LabelsOperator(operator)]
    return "(" + joiner.join(f"@{_normalize_label(label)}" for label in labels) + ")"


def describe_labels(
    labels: Optional[Sequence[str]],
    operator: LabelsOperator | str = LabelsOperator.OR,
) -> str:
    """Human readable form of a label filter, e.g. ``@work & @urgent``."""
    if not labels:
        return ""
    joiner = " & " if LabelsOperator(operator) == LabelsOperator.AND else " | "
    return joiner.join(f"@{_normalize_label(label)}" for label in labels)
