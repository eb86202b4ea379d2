"""Configuration for the Motoko compiler."""

from collections.abc import Mapping
from typing import Literal

from pydantic import BaseModel, Field


class MotokoCompilerConfig(BaseModel):
    """Configuration for the Motoko compiler.

    ``packages`` maps package names (``mo:<name>``) to source directories.
    """

    executable: str = "moc"
    packages: Mapping[str, str] = Field(default_factory=dict)
    alias: str = "snippet"
    target: Literal["ic", "wasi"] = "ic"
