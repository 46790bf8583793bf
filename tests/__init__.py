"""Test suite for the branchrun package.

This package contains unit and integration tests validating step
execution, scoping, hook dispatch, pausing and resumption of the
execution core, along with its settings and command-line utilities.
"""
