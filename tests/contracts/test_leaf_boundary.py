# tests/contracts/test_leaf_boundary.py
"""Tests that contracts remains a leaf module.

sparkbinding.contracts must import without loading core, sources, runtime
or engine, and without third-party packages such as pydantic or pyspark.
"""

import subprocess
import sys

import pytest

_CHECK = """
import sys
before = set(sys.modules.keys())
import sparkbinding.contracts
after = set(sys.modules.keys())
new_modules = after - before

forbidden_prefixes = (
    'sparkbinding.core', 'sparkbinding.sources', 'sparkbinding.runtime', 'sparkbinding.engine',
    'pydantic', 'pyspark', 'fsspec', 'pluggy', 'structlog',
)
leaked = sorted(m for m in new_modules if m.startswith(forbidden_prefixes))
if leaked:
    print(f"FAIL: modules loaded: {leaked}")
    sys.exit(1)
print(f"OK: {len(new_modules)} modules loaded")
"""


class TestContractsLeafBoundary:
    """Verify contracts doesn't import the rest of the package."""

    @pytest.mark.slow
    def test_contracts_import_is_leaf(self) -> None:
        result = subprocess.run(
            [sys.executable, "-c", _CHECK],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0, f"Non-leaf modules were loaded:\n{result.stdout}\n{result.stderr}"
