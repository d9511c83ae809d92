"""Category and tag reconciliation.

A non-empty list replaces the record's assignments for that taxonomy; an empty
or absent list leaves them untouched.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from contentpulse_sync.domain.model import Taxonomy
from contentpulse_sync.domain.result import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from contentpulse_sync.domain.model import TermRef
    from contentpulse_sync.domain.ports.store import TaxonomyStore

log = getLogger(__name__)


def term_names(terms: Iterable[TermRef]) -> list[str]:
    return [term.name.strip() for term in terms if term.name.strip()]


def resolve_term_ids(store: TaxonomyStore, taxonomy: Taxonomy, names: Iterable[str]) -> list[int]:
    term_ids: list[int] = []
    for name in names:
        term = store.find_term(taxonomy, name)
        if term is None:
            match store.create_term(taxonomy, name):
                case Ok(created):
                    term = created
                case Err(error):
                    log.warning("Skipping %s %r: %s", taxonomy, name, error.message)
                    continue
        if term.id is not None and term.id not in term_ids:
            term_ids.append(term.id)
    return term_ids


def apply_taxonomies(
    store: TaxonomyStore,
    record_id: int,
    categories: Sequence[TermRef],
    tags: Sequence[TermRef],
) -> None:
    if categories:
        category_ids = resolve_term_ids(store, Taxonomy.CATEGORY, term_names(categories))
        if category_ids:
            store.set_record_terms(record_id, Taxonomy.CATEGORY, category_ids)

    if tags:
        tag_ids = resolve_term_ids(store, Taxonomy.TAG, term_names(tags))
        store.set_record_terms(record_id, Taxonomy.TAG, tag_ids)
