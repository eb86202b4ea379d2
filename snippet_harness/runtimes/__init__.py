"""Runtime-instance collaborators that deploy and invoke compiled snippets."""
