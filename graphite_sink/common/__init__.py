"""Shared infrastructure: exceptions, logging, cycle correlation, retry."""
