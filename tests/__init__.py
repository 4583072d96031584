"""
Tests Package - Unit Tests

Test structure:
- tests/conftest.py - Shared fixtures (settings, fake HTTP transport, sleep recorder)
- tests/test_scoring.py - Per-field risk scorers
- tests/test_classifier.py - Alert category aggregation
- tests/test_retry.py - Exponential backoff loop
- tests/test_api_client.py - Pagination and submission over a mock transport
- tests/test_assessment_job.py - Full run and scheduler entry point
- tests/test_config.py, tests/test_logging.py - Ambient utilities

No test touches the network or sleeps for real.
"""
