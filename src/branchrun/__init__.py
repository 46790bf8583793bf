"""Execution core for hierarchical branch/step test scripts.

The `branchrun` package walks a pre-built tree of branches and steps,
served by an external Tree, and executes it on behalf of a Runner.

Key features:
- lexically nested variable scopes mirroring step indentation;
- pass/fail classification of steps against their expectation;
- step-level and branch-level hooks reusing the step executor;
- cooperative pausing for breakpoints, pause-on-failure, single-stepping
  and interactive injection of ad hoc branches.

Parsing test scripts, rendering reports and scheduling multiple
instances are left to the collaborators.
"""
