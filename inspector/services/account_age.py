"""Account age estimate from the FID alone.

FIDs are allocated roughly sequentially, so age is approximated linearly:
    days = REFERENCE_DAYS - floor(fid / FIDS_PER_DAY)

Both constants were fitted once and are not recalibrated against real
registration timestamps. The estimate drifts as the protocol ages; treat it
as a coarse hint. Implausibly high FIDs yield negative days, which are
returned as-is.
"""

from inspector.models.verdict import AccountAge, AgeBand

FIDS_PER_DAY = 818
REFERENCE_DAYS = 1100

# (exclusive lower bound in days, band), checked in order.
AGE_BANDS = (
    (730, AgeBand.OG),
    (365, AgeBand.VETERAN),
    (180, AgeBand.ESTABLISHED),
    (30, AgeBand.NEW),
)


def estimate_age_days(fid: int) -> int:
    return REFERENCE_DAYS - fid // FIDS_PER_DAY


def age_band(days: int) -> AgeBand:
    for threshold, band in AGE_BANDS:
        if days > threshold:
            return band
    return AgeBand.VERY_NEW


def estimate_account_age(fid: int) -> AccountAge:
    """Approximate account age in days and its band."""
    days = estimate_age_days(fid)
    return AccountAge(days=days, label=age_band(days))
