"""
Test suite for the Multi-Pass Consistency Checker.

Organized by module:
- test_tables.py - Findings table parsing and serialization
- test_similarity.py - TF-IDF and cosine similarity
- test_matcher.py - Intersection matcher
- test_union.py - Union reducer
- test_prompts.py - Base prompt, emphasis and pass prefixes
- test_orchestrator.py - Multi-pass runs and re-merging
- test_providers.py - Pricing, failure classification, usage extraction
- test_llm_factory.py - Settings and LLM construction
- test_logger.py - Rich logging and run context
- test_api.py - FastAPI endpoint tests
"""

# Test fixtures are provided in conftest.py
