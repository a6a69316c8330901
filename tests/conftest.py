import pytest


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """Keep session logs out of the real home dir and drop matcher overrides."""
    monkeypatch.setenv("EDITCORE_HOME", str(tmp_path / "editcore-home"))
    for name in ("EDITCORE_SIMILARITY_THRESHOLD", "EDITCORE_MIN_MARGIN", "EDITCORE_MAX_CANDIDATES"):
        monkeypatch.delenv(name, raising=False)
