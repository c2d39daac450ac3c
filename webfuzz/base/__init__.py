"""Module __init__: foundational pieces the rest of webfuzz depends on."""
#
# PURPOSE:
# Marks the "base" directory as a package holding run configuration and the
# exception taxonomy.
#
# WHAT'S IN THIS MODULE:
# - config.py: FuzzConfig and friends, JSON/env loading, logging setup
# - exceptions.py: configuration, check, trial and driver exceptions
#
