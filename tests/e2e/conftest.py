import pytest


@pytest.fixture(autouse=True)
def isolated_logging(clean_logging_state, monkeypatch, tmp_path):
    """The CLI installs its logging filter on the root logger; keep it out of other tests."""
    monkeypatch.setenv("TECHSHARE_HOME", str(tmp_path / "techshare_home"))
    yield
