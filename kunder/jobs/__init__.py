"""
Maintenance jobs.

Each job loads records, runs the reconciliation engine, and writes the
resulting diffs back unless it is a dry run. The scripts in scripts/ are
thin command-line wrappers around these functions.
"""
