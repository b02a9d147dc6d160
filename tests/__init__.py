"""
Test suite for crate-indexer

Contains:
- tests/unit/          : Unit tests for domain models, store, handlers and indexer pipeline
"""
