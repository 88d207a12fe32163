"""
Tests for enrollment pricing.

Verifies the membership discount, the inclusive peak-hour window and that
the surcharge is applied on top of the discount.
"""

import pytest

from app.services.pricing import compute_final_price, is_peak_hour


class TestPeakHour:
    @pytest.mark.parametrize("start_time", ["18:00", "19:30", "22:00"])
    def test_peak_window_is_inclusive(self, start_time):
        assert is_peak_hour(start_time)

    @pytest.mark.parametrize("start_time", ["09:00", "17:59", "22:01", "23:30"])
    def test_outside_peak_window(self, start_time):
        assert not is_peak_hour(start_time)


class TestComputeFinalPrice:
    def test_peak_session_gets_discount_then_surcharge(self):
        """100 * 0.95 * 1.10 = 104.5"""
        assert compute_final_price(100, "19:00") == 104.5

    def test_off_peak_session_only_gets_discount(self):
        assert compute_final_price(100, "09:00") == 95.0

    def test_zero_price_stays_zero(self):
        assert compute_final_price(0, "20:00") == 0.0

    def test_price_is_rounded_to_cents(self):
        """10.01 * 0.95 = 9.5095"""
        assert compute_final_price(10.01, "09:00") == 9.51

    def test_float_noise_is_not_stored(self):
        assert repr(compute_final_price(100, "19:00")) == "104.5"
