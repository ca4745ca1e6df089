"""Shared primitives: exceptions, validation, retry, clock."""
