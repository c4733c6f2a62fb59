"""
Federated catalog search package.

This package provides a pure-Python, in-memory search stack:
- analyzers: Tokenizer/normalizer shared by builds and queries
- schema / entities: Per-type fields, boosts and result projections
- fuzzy / stats: Edit distance and BM25 helpers
- type_index: Inverted index for one entity type
- registry: Generation-swapped holder of all per-type indices
- dispatcher / ranking / filters / snippet / suggest: Query pipeline stages
"""
