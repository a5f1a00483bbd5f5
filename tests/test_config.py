import pytest
from idemix_card.config import _env_flag, _log_level


@pytest.mark.parametrize(
    "value, level",
    [
        (None, "INFO"),
        ("debug", "DEBUG"),
        (" Warning ", "WARNING"),
        ("verbose", "INFO"),
        ("", "INFO"),
    ],
)
def test_log_level(value, level) -> None:
    """Test that level names are normalized and unknown names fall back to INFO."""
    assert _log_level(value) == level


def test_env_flag(monkeypatch) -> None:
    """Test reading boolean settings from the environment."""
    monkeypatch.delenv("IDEMIX_CARD_TEST_FLAG", raising=False)
    assert _env_flag("IDEMIX_CARD_TEST_FLAG", True) is True
    monkeypatch.setenv("IDEMIX_CARD_TEST_FLAG", "off")
    assert _env_flag("IDEMIX_CARD_TEST_FLAG", True) is False
    monkeypatch.setenv("IDEMIX_CARD_TEST_FLAG", "Yes")
    assert _env_flag("IDEMIX_CARD_TEST_FLAG", False) is True
