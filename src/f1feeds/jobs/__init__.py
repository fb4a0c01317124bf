"""Batch jobs, one module per published JSON document."""
