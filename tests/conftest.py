import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'pkglock'
for p in (SRC_ROOT, TESTS_ROOT):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))


from pkglock.core.utils.stdlib_logging import reset_logging_for_tests

# Mirrors the deploy-style example: one default, one override, one template.
COLOR_SPEC = """\
defaults:
  COLOR: red
templates:
  GREETING: "hello {{.COLOR}}"
layers:
  - name: base
    dockerfile: |
      FROM debian
      LABEL color={{ COLOR }}
  - name: app
    dockerfile: |
      FROM {{ BASE_LAYER_ID }}
      RUN echo {{ GREETING }}
packages:
  - COLOR: blue
    PACKAGE_NAME: app
"""


@pytest.fixture(autouse=True)
def _isolate_pkglock_env(monkeypatch: pytest.MonkeyPatch):
    """Drop PKGLOCK_* settings overrides inherited from the caller's shell."""
    import os

    for key in list(os.environ):
        if key.startswith("PKGLOCK_"):
            monkeypatch.delenv(key, raising=False)
    # COLOR is a spec default in the shared fixture; a stray shell value would override it.
    monkeypatch.delenv("COLOR", raising=False)
    yield
    reset_logging_for_tests()


@pytest.fixture
def color_spec_text() -> str:
    return COLOR_SPEC


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """A repository root holding ``packages.yml``."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "packages.yml").write_text(COLOR_SPEC, encoding="utf-8")
    return root
