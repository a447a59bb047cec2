"""Inspect each intermediate stage of package expansion."""
