"""Fixtures for integration tests."""

import stat
from collections.abc import Generator
from pathlib import Path

import pytest
from aioresponses import aioresponses as aioresponses_cls

STUB_COMPILER = """\
#!/bin/sh
echo "$@" >> "$(dirname "$0")/calls.log"
out=""
src=""
mode="wasm"
while [ $# -gt 0 ]; do
  case "$1" in
    -o) out="$2"; shift 2 ;;
    -c) src="$2"; shift 2 ;;
    --idl) mode="idl"; src="$2"; shift 2 ;;
    --package|--actor-alias) shift 3 ;;
    --actor-idl) shift 2 ;;
    *) shift ;;
  esac
done
if grep -q "garbled" "$src"; then
  printf "\\377 bad diagnostic\\n" >&2
  exit 1
fi
if grep -q "unbound" "$src"; then
  echo "$src:1.1-1.8: type error [M0057], unbound variable" >&2
  exit 1
fi
if [ "$mode" = "idl" ]; then
  echo "service : {}" > "$out"
else
  cat "$src" > "$out"
fi
"""


@pytest.fixture
def aioresponses() -> Generator[aioresponses_cls]:
    """Intercept aiohttp requests."""
    with aioresponses_cls() as mocked:
        yield mocked


@pytest.fixture
def stub_compiler(tmp_path: Path) -> Path:
    """Create an executable standing in for moc.

    Every invocation appends its arguments to ``calls.log`` next to it.
    """
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    executable = bin_dir / "moc"
    executable.write_text(STUB_COMPILER)
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP)
    return executable
