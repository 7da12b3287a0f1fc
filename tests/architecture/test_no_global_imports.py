# tests/architecture/test_no_global_imports.py
import re
from pathlib import Path


def test_forbid_outer_layer_imports_in_domain():
    """
    Scans the domain package to ensure no module imports the adapters, the entry points,
    bootstrap or the global config. Collaborators are passed in, never looked up.
    """
    project_root = Path(__file__).parent.parent.parent
    domain_src = project_root / "src" / "techshare" / "domain"

    forbidden_imports = (
        re.compile(r"from (techshare|\.\.)\.?adapters"),
        re.compile(r"from (techshare|\.\.)\.?entrypoints"),
        re.compile(r"from (techshare|\.\.)\.?bootstrap"),
        re.compile(r"from (techshare|\.\.)\.?config import"),
    )

    violations = []
    for py_file in domain_src.rglob("*.py"):
        content = py_file.read_text()
        for pattern in forbidden_imports:
            if pattern.search(content):
                violations.append(str(py_file.relative_to(project_root)))

    assert not violations, f"Forbidden outer layer imports found in: {', '.join(violations)}"
