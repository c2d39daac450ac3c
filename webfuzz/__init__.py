# ============================================================================
# webfuzz/__init__.py
# Package Marker for the Property-Based Web Fuzzer
# ============================================================================
#
# PURPOSE:
# webfuzz drives a live web session through randomized inputs (paths, query
# parameters, form values, click bursts, history actions) and checks that
# invariants hold across many seeded trials. Failing trials are shrunk to a
# minimal counterexample that replays exactly from the reported seed.
#
# LAYOUT:
# - arbitraries/: seeded generators with shrink trees
# - driver/: the SessionDriver capability and its Playwright/httpx adapters
# - checks/: named properties (arbitrary + predicate) and the plugin registry
# - executor/: the property runner (trials, shrinking) and run orchestration
# - reporting/: report aggregation and console/JSON reporters
# - base/: configuration and the exception taxonomy
#
# ============================================================================

__version__ = "0.3.0"
