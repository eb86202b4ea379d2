"""Compiler collaborators that turn program units into artifacts."""
