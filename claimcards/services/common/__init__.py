"""
Common utilities shared across ranking, pipeline and adapter modules.

Modules:
    - text_cleaner: Text normalization, tokenization and excerpts
    - concurrency: Order-preserving bounded worker pool
    - ids: Deterministic claim card ids
    - dedup: Source deduplication
"""
