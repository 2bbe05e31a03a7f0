"""Normalize heterogeneous result bodies into flat lists of findings.

The API has shipped several response shapes over time. Each rule below
recognizes one of them; rules are tried in order and the first one that
matches decides the result.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from codeant_ci.core.logging import get_logger

LOGGER = get_logger(__name__)

# A rule returns the extracted list, or None when the shape does not match.
ExtractionRule = Callable[[Any, str], Optional[List[Any]]]


def body_is_list(body: Any, item_field: str) -> Optional[List[Any]]:
    """``[...]``"""
    if isinstance(body, list):
        return list(body)
    return None


def named_list_field(body: Any, item_field: str) -> Optional[List[Any]]:
    """``{"issues": [...]}`` / ``{"vulnerabilities": [...]}``"""
    if isinstance(body, dict) and isinstance(body.get(item_field), list):
        return list(body[item_field])
    return None


def results_list(body: Any, item_field: str) -> Optional[List[Any]]:
    """``{"results": [...]}``"""
    if isinstance(body, dict) and isinstance(body.get("results"), list):
        return list(body["results"])
    return None


def results_mapping(body: Any, item_field: str) -> Optional[List[Any]]:
    """``{"results": {"a": [...], "b": {...}}}``

    List values are concatenated and mapping values appended as single
    items, in key order. Scalar values are dropped.
    """
    if not isinstance(body, dict) or not isinstance(body.get("results"), dict):
        return None

    items: List[Any] = []
    for value in body["results"].values():
        if isinstance(value, list):
            items.extend(value)
        elif isinstance(value, dict):
            items.append(value)
    return items


EXTRACTION_RULES: Tuple[ExtractionRule, ...] = (
    body_is_list,
    named_list_field,
    results_list,
    results_mapping,
)


def extract_items(body: Any, item_field: str) -> List[Any]:
    """Extract the list of findings from a result body.

    Args:
        body: Parsed JSON response (any shape).
        item_field: Name of the kind-specific list field, e.g. ``issues``.

    Returns:
        Findings in response order; empty if no rule matches.
    """
    if body is None:
        return []

    for rule in EXTRACTION_RULES:
        items = rule(body, item_field)
        if items is not None:
            return items

    LOGGER.debug(f"Unrecognized result shape ({type(body).__name__}); no {item_field} extracted")
    return []
