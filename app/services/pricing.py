# app/services/pricing.py
"""
Enrollment pricing rules.

Session start times are zero-padded 24-hour "HH:MM" strings, so the peak
window check is a plain string comparison. Final prices are rounded to
cents before they are stored or published.
"""

MEMBERSHIP_DISCOUNT = 0.95
PEAK_SURCHARGE = 1.10
PEAK_START = "18:00"
PEAK_END = "22:00"


def is_peak_hour(start_time: str) -> bool:
    return PEAK_START <= start_time <= PEAK_END


def compute_final_price(base_price: float, start_time: str) -> float:
    """
    Applies the membership discount, then the peak-hour surcharge.

    >>> compute_final_price(100, "19:00")
    104.5
    >>> compute_final_price(100, "09:00")
    95.0
    """
    price = base_price * MEMBERSHIP_DISCOUNT
    if is_peak_hour(start_time):
        price *= PEAK_SURCHARGE
    return round(price, 2)
