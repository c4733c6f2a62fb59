"""Inverted index for a single entity type.

One ``TypeIndex`` owns the postings of exactly one entity type. An instance
is never modified after construction: ``build`` stages everything in local
structures and returns a new index, leaving the one it was called on as it
was. The registry swaps built indices in per generation (see ``registry``).

Query terms are expanded three ways before scoring:
- exact: the term itself, full weight
- prefix: indexed terms starting with the query term, discounted by how much
  of the indexed term the query covers
- fuzzy: indexed terms within the edit distance allowed by the tolerance,
  discounted by distance
"""

from __future__ import annotations

import bisect
from collections import defaultdict
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
import logging
from types import MappingProxyType
from typing import Literal

from acuref_search.domain.records import BaseRecord, EntityType
from acuref_search.search.analyzers import query_terms, tokenize
from acuref_search.search.fuzzy import DEFAULT_FUZZY_TOLERANCE, find_fuzzy_matches, get_max_edit_distance
from acuref_search.search.models import Posting, RawHit
from acuref_search.search.schema import Schema
from acuref_search.search.stats import (
    BM25Params,
    FieldLengthStats,
    bm25,
    calculate_idf,
    compute_field_length_stats,
)


logger = logging.getLogger(__name__)

CombineWith = Literal["or", "and"]

_EXACT_WEIGHT = 1.0
_PREFIX_WEIGHT = 0.375
_FUZZY_WEIGHT = 0.45

# Catalog fields are short; length normalisation is damped and capped at 4x the
# field average.
CATALOG_BM25_K1 = 1.2
CATALOG_BM25_B = 0.7
CATALOG_MAX_LENGTH_RATIO = 4.0
CATALOG_BM25 = BM25Params(k1=CATALOG_BM25_K1, b=CATALOG_BM25_B, max_length_ratio=CATALOG_MAX_LENGTH_RATIO)


@dataclass(frozen=True)
class QueryOptions:
    """Per-query matching options."""

    prefix: bool = True
    fuzzy: bool = True
    fuzzy_tolerance: float = DEFAULT_FUZZY_TOLERANCE
    combine_with: CombineWith = "or"


class TypeIndex:
    """Postings, field weights and term lookup for one entity type."""

    def __init__(self, entity_type: EntityType, schema: Schema, bm25_params: BM25Params = CATALOG_BM25) -> None:
        self.entity_type = entity_type
        self.schema = schema
        self.bm25_params = bm25_params
        self._records: Mapping[str, BaseRecord] = MappingProxyType({})
        self._order: Mapping[str, int] = MappingProxyType({})
        self._postings: Mapping[str, Mapping[str, tuple[Posting, ...]]] = MappingProxyType({})
        self._field_lengths: Mapping[str, Mapping[str, int]] = MappingProxyType({})
        self._field_stats: Mapping[str, FieldLengthStats] = MappingProxyType({})
        self._vocabulary: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, doc_id: object) -> bool:
        return doc_id in self._records

    @property
    def doc_ids(self) -> tuple[str, ...]:
        return tuple(self._records)

    @property
    def vocabulary(self) -> tuple[str, ...]:
        """Sorted distinct terms across all searchable fields."""
        return self._vocabulary

    def get_record(self, doc_id: str) -> BaseRecord | None:
        return self._records.get(doc_id)

    def build(self, records: Iterable[BaseRecord]) -> TypeIndex:
        """Return a new index of this type holding exactly ``records``.

        ``self`` is left untouched, so an index already being queried can be
        used as the template for its replacement. A later record with an
        already-seen id replaces the earlier one but keeps its position for
        tie-breaking.

        Raises:
            TypeError: if a record is not a ``BaseRecord`` of this index's type.
        """
        by_id: dict[str, BaseRecord] = {}
        for record in records:
            if not isinstance(record, BaseRecord) or record.entity_type != self.entity_type:
                got = getattr(record, "type", type(record).__name__)
                msg = f"{self.entity_type.value} index cannot hold record of type {got!r}"
                raise TypeError(msg)
            by_id[record.id] = record

        postings: dict[str, dict[str, dict[str, int]]] = {f.name: defaultdict(dict) for f in self.schema.text_fields}
        field_lengths: dict[str, dict[str, int]] = {f.name: {} for f in self.schema.text_fields}
        vocabulary: set[str] = set()

        for doc_id, record in by_id.items():
            for text_field in self.schema.text_fields:
                # missing fields index as empty text
                length = 0
                field_postings = postings[text_field.name]
                for term in tokenize(record.searchable.get(text_field.name)):
                    counts = field_postings[term]
                    counts[doc_id] = counts.get(doc_id, 0) + 1
                    vocabulary.add(term)
                    length += 1
                field_lengths[text_field.name][doc_id] = length

        built = type(self)(self.entity_type, self.schema, self.bm25_params)
        built._records = MappingProxyType(by_id)
        built._order = MappingProxyType({doc_id: position for position, doc_id in enumerate(by_id)})
        built._postings = MappingProxyType(
            {
                field_name: MappingProxyType(
                    {
                        term: tuple(Posting(doc_id, count) for doc_id, count in counts.items())
                        for term, counts in terms.items()
                    }
                )
                for field_name, terms in postings.items()
            }
        )
        built._field_lengths = MappingProxyType(
            {name: MappingProxyType(lengths) for name, lengths in field_lengths.items()}
        )
        built._field_stats = MappingProxyType(compute_field_length_stats(field_lengths))
        built._vocabulary = tuple(sorted(vocabulary))
        logger.debug(
            "Built %s index: %d records, %d terms", self.entity_type.value, len(by_id), len(built._vocabulary)
        )
        return built

    def iter_prefixed(self, prefix: str) -> Iterator[str]:
        """Yield indexed terms starting with ``prefix`` in sorted order."""
        start = bisect.bisect_left(self._vocabulary, prefix)
        for term in self._vocabulary[start:]:
            if not term.startswith(prefix):
                break
            yield term

    def expand_term(self, term: str, options: QueryOptions) -> dict[str, float]:
        """Return indexed terms matching ``term`` with their expansion weight."""
        expansions: dict[str, float] = {}
        if options.prefix:
            for indexed in self.iter_prefixed(term):
                weight = _EXACT_WEIGHT if indexed == term else _PREFIX_WEIGHT * len(term) / len(indexed)
                expansions[indexed] = max(expansions.get(indexed, 0.0), weight)
        elif self._has_term(term):
            expansions[term] = _EXACT_WEIGHT

        if options.fuzzy:
            max_distance = get_max_edit_distance(len(term), options.fuzzy_tolerance)
            if max_distance > 0:
                for indexed, distance in find_fuzzy_matches(term, self._vocabulary, max_distance):
                    weight = _EXACT_WEIGHT if distance == 0 else _FUZZY_WEIGHT * len(term) / (len(term) + distance)
                    expansions[indexed] = max(expansions.get(indexed, 0.0), weight)
        return expansions

    def _has_term(self, term: str) -> bool:
        position = bisect.bisect_left(self._vocabulary, term)
        return position < len(self._vocabulary) and self._vocabulary[position] == term

    def query(self, text: str, options: QueryOptions | None = None) -> list[RawHit]:
        """Score records against ``text``; blank text yields no hits.

        Scores are a weighted sum over query terms, their expansions and the
        fields they hit. With ``combine_with="and"`` a record must match every
        query term in at least one field.
        """
        options = options or QueryOptions()
        terms = query_terms(text)
        if not terms or not self._records:
            return []

        total_docs = len(self._records)
        scores: dict[str, float] = defaultdict(float)
        matched_terms: dict[str, set[int]] = defaultdict(set)

        for term_idx, term in enumerate(terms):
            expansions = self.expand_term(term, options)
            if not expansions:
                continue
            for text_field in self.schema.text_fields:
                field_postings = self._postings.get(text_field.name, {})
                stats = self._field_stats.get(text_field.name)
                if not field_postings or stats is None:
                    continue
                avg_length = max(stats.average_length, 1e-9)
                doc_lengths = self._field_lengths[text_field.name]
                for indexed, weight in expansions.items():
                    postings = field_postings.get(indexed)
                    if not postings:
                        continue
                    idf = calculate_idf(len(postings), total_docs)
                    for posting in postings:
                        doc_length = doc_lengths.get(posting.doc_id, posting.frequency)
                        tf_weight = bm25(posting.frequency, doc_length, avg_length, self.bm25_params)
                        scores[posting.doc_id] += idf * tf_weight * text_field.boost * weight
                        matched_terms[posting.doc_id].add(term_idx)

        if options.combine_with == "and":
            required = len(terms)
            scores = {doc_id: score for doc_id, score in scores.items() if len(matched_terms[doc_id]) == required}

        order = self._order
        return [
            RawHit(doc_id=doc_id, score=score)
            for doc_id, score in sorted(scores.items(), key=lambda item: (-item[1], order[item[0]]))
            if score > 0
        ]

    def complete(self, text: str, fields: Iterable[str], limit: int) -> list[str]:
        """Return prefix completions of the last term of ``text``.

        Earlier terms must occur (exactly) in the same record, within
        ``fields``, and are kept in the suggestion. Completions come in sorted
        term order.
        """
        terms = list(tokenize(text))
        if not terms or limit <= 0:
            return []
        *head, last = terms
        field_names = [name for name in fields if name in self._postings]

        candidates: set[str] | None = None
        for term in head:
            docs = self._docs_with_term(term, field_names)
            candidates = docs if candidates is None else candidates & docs
            if not candidates:
                return []

        stem = " ".join(head)
        suggestions: list[str] = []
        for completion in self.iter_prefixed(last):
            docs = self._docs_with_term(completion, field_names)
            if not docs or (candidates is not None and not docs & candidates):
                continue
            suggestions.append(f"{stem} {completion}" if stem else completion)
            if len(suggestions) >= limit:
                break
        return suggestions

    def _docs_with_term(self, term: str, field_names: Iterable[str]) -> set[str]:
        docs: set[str] = set()
        for name in field_names:
            docs.update(posting.doc_id for posting in self._postings[name].get(term, ()))
        return docs
