"""
Test suite for Crawly.

Provides tests for all modules:
- Unit tests for each crawl component
- End-to-end crawls against an in-memory site
- Fixtures for common test data
"""
