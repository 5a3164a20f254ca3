"""Imperative shell: services that write within the caller's transaction."""
