"""Command line tooling for portal builds."""
