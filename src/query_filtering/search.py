"""SearchCompiler: the free-text ``search``/``q`` term as an OR predicate."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from .operators import FilterOperator
from .predicates import FieldFilter, FilterPredicate, OrFilter, RawFilter

if TYPE_CHECKING:
    from .fields import SearchFields

logger = logging.getLogger(__name__)


class SearchCompiler:
    """
    Build ``text_field contains term OR exact_field == term OR <custom>``.

    Text fields match case-insensitively on an escaped substring; exact
    fields match the term verbatim. A ``custom_search`` hook may contribute
    a :class:`FilterPredicate`, a raw backend filter mapping, or ``None``.
    """

    def build(
        self, term: str | None, search_fields: SearchFields | None
    ) -> OrFilter | None:
        """Return the search predicate, or ``None`` when there is nothing to search."""
        if term is None or not term.strip() or search_fields is None:
            return None

        conditions: list[FilterPredicate] = [
            FieldFilter(name, {FilterOperator.CONTAINS: term})
            for name in search_fields.text_fields
        ]
        conditions.extend(
            FieldFilter(name, {FilterOperator.EQ: term})
            for name in search_fields.exact_fields
        )
        if search_fields.custom_search is not None:
            extra = search_fields.custom_search(term)
            if isinstance(extra, FilterPredicate):
                conditions.append(extra)
            elif isinstance(extra, Mapping):
                if extra:
                    conditions.append(RawFilter(extra))
            elif extra is not None:
                raise TypeError(
                    "custom_search must return a FilterPredicate, a mapping or None, "
                    f"got {type(extra).__name__}"
                )

        if not conditions:
            return None
        logger.debug("Search term %r spans %d condition(s)", term, len(conditions))
        return OrFilter(*conditions)
