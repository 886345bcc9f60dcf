"""alignment-verifier: checks that task tracker statuses match repository activity."""

__version__ = "0.1.0"
