import pytest
from protean.exceptions import ConfigurationError

from marketplace.errors import InvalidDeliveryZone
from marketplace.pricing.settings import PricingMode, PricingSettings, load_settings
from marketplace.pricing.zones import (
    available_landmarks,
    available_states,
    find_landmark,
    find_state,
    landmarks_by_zone,
)


class TestLoadSettings:
    def test_defaults(self):
        settings = load_settings()
        assert settings.mode == PricingMode.LANDMARK
        assert settings.vat_rate == 0.075
        assert settings.commission_rate == 0.10
        assert settings.rider_rate_per_delivery == 500
        assert settings.taxes_delivery is False
        assert settings.vendor_share == pytest.approx(0.9)

    def test_state_mode_from_env(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_PRICING_MODE", "STATE")
        settings = load_settings()
        assert settings.mode == PricingMode.STATE
        assert settings.taxes_delivery is True

    def test_vat_on_delivery_override(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_VAT_ON_DELIVERY", "yes")
        assert load_settings().taxes_delivery is True

    def test_numeric_overrides(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_COMMISSION_RATE", "0.15")
        monkeypatch.setenv("MARKETPLACE_RIDER_RATE", "650")
        settings = load_settings()
        assert settings.vendor_share == pytest.approx(0.85)
        assert settings.rider_rate_per_delivery == 650

    def test_unknown_mode(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_PRICING_MODE", "distance")
        with pytest.raises(ConfigurationError):
            load_settings()

    def test_bad_boolean(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_VAT_ON_DELIVERY", "sometimes")
        with pytest.raises(ConfigurationError):
            load_settings()

    def test_bad_number(self, monkeypatch):
        monkeypatch.setenv("MARKETPLACE_VAT_RATE", "seven")
        with pytest.raises(ConfigurationError):
            load_settings()

    def test_explicit_override_wins_over_mode_default(self):
        assert PricingSettings(mode=PricingMode.STATE, vat_on_delivery=False).taxes_delivery is False


class TestReferenceTables:
    def test_landmark_lookup_is_case_insensitive(self):
        landmark = find_landmark("eKEKI")
        assert landmark.name == "Ekeki"
        assert landmark.zone == 2
        assert landmark.base_fee == 1000

    def test_unknown_landmark(self):
        with pytest.raises(InvalidDeliveryZone):
            find_landmark("Nowhere")

    def test_blank_state(self):
        with pytest.raises(InvalidDeliveryZone):
            find_state("")

    def test_landmarks_sorted(self):
        names = available_landmarks()
        assert names == sorted(names)
        assert len(names) == 18

    def test_landmarks_grouped_by_zone(self):
        grouped = landmarks_by_zone()
        assert set(grouped) == {1, 2, 3, 4}
        assert "Igbogene" in grouped[4]

    def test_states(self):
        assert available_states() == ["Bayelsa", "Rivers", "Abuja", "Lagos"]
