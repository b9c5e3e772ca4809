# =============================================================================
# tests/ - Test Suite
# =============================================================================
# One module per feature, all running against the in-memory Supabase fake
# in conftest.py. Luma, Stripe and Unsplash are mocked.
#
# Run tests with: pip install -e ".[test]" && pytest
# =============================================================================
