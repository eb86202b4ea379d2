"""Validate code snippets embedded in documentation comments."""
