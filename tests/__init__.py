"""
Company Cleaner Test Suite

Test organization:
- unit/: Fast tests without network access (pipeline stages, use case,
  Notion client over a mock transport, HTTP API, CLI)

Run tests:
    pytest                           # All tests
    pytest -m unit                   # Only unit tests
    pytest tests/unit/               # Specific directory
    pytest -k test_clean_page        # Specific test name pattern
"""
