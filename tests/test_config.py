import pytest
from pydantic import ValidationError

from payment_service.app.config import Settings


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "SERVICE_PROFILE",
        "ORDER_LIST_MIN_AMOUNT",
        "ENABLE_CUSTOMER_ENDPOINTS",
        "DATABASE_URL",
        "SIMULATE_DELAY",
        "SIMULATE_DELAY_SECONDS",
        "API_PREFIX",
        "PORT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults_to_combined_profile(clean_env):
    settings = Settings(_env_file=None)

    assert settings.service_profile == "combined"
    assert settings.order_list_min_amount == 50.0
    assert settings.enable_customer_endpoints is True
    assert settings.api_prefix == "/api"
    assert settings.simulate_delay is False
    assert settings.port == 3000


def test_lite_profile(clean_env):
    clean_env.setenv("SERVICE_PROFILE", "lite")

    settings = Settings(_env_file=None)

    assert settings.service_profile == "lite"
    assert settings.order_list_min_amount is None
    assert settings.enable_customer_endpoints is False


def test_explicit_overrides_win_over_profile(clean_env):
    clean_env.setenv("SERVICE_PROFILE", "combined")
    clean_env.setenv("ORDER_LIST_MIN_AMOUNT", "")
    clean_env.setenv("ENABLE_CUSTOMER_ENDPOINTS", "false")
    clean_env.setenv("SIMULATE_DELAY", "true")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("LOG_LEVEL", "debug")

    settings = Settings(_env_file=None)

    assert settings.order_list_min_amount is None
    assert settings.enable_customer_endpoints is False
    assert settings.simulate_delay is True
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"


def test_lite_profile_with_explicit_floor(clean_env):
    clean_env.setenv("SERVICE_PROFILE", "lite")
    clean_env.setenv("ORDER_LIST_MIN_AMOUNT", "25")

    settings = Settings(_env_file=None)

    assert settings.order_list_min_amount == 25.0
    assert settings.enable_customer_endpoints is False


def test_for_profile_keyword_overrides(clean_env):
    settings = Settings.for_profile("lite", enable_customer_endpoints=True)

    assert settings.order_list_min_amount is None
    assert settings.enable_customer_endpoints is True


def test_unknown_profile(clean_env):
    clean_env.setenv("SERVICE_PROFILE", "enterprise")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_malformed_number_is_reported_per_field(clean_env):
    clean_env.setenv("SIMULATE_DELAY_SECONDS", "abc")

    with pytest.raises(ValidationError) as excinfo:
        Settings(_env_file=None)

    assert excinfo.value.errors()[0]["loc"] == ("simulate_delay_seconds",)
