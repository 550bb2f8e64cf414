"""Gap-filler tests: exact hits, linear fill, edges, and seeded variation."""

from datetime import date, timedelta

import pytest

from waterlogic import exceptions, interpolate
from waterlogic.types import ReadingPoint


def _jan(n: int) -> list[date]:
    return [date(2024, 1, d) for d in range(1, n + 1)]


def test_linear_fill_between_two_points():
    obs = [ReadingPoint(date(2024, 1, 1), 1000), ReadingPoint(date(2024, 1, 5), 1200)]
    out = interpolate.interpolate_missing_days(obs, _jan(5))
    assert [r.value for r in out] == [1000, 1050, 1100, 1150, 1200]
    assert [r.is_interpolated for r in out] == [False, True, True, True, False]


def test_output_follows_target_order_and_length():
    obs = [ReadingPoint(date(2024, 1, 3), 10.0)]
    targets = list(reversed(_jan(4)))
    out = interpolate.interpolate_missing_days(obs, targets)
    assert [r.date for r in out] == targets


def test_no_observations_gives_zero_estimates():
    out = interpolate.interpolate_missing_days([], _jan(31), add_variation=True)
    assert len(out) == 31
    assert all(r.value == 0 and r.is_interpolated for r in out)


def test_flat_extrapolation_at_edges():
    obs = [ReadingPoint(date(2024, 1, 10), 7.0), ReadingPoint(date(2024, 1, 20), 9.0)]
    out = interpolate.interpolate_missing_days(obs, _jan(31))
    assert all(r.value == 7.0 for r in out[:9])
    assert all(r.value == 9.0 for r in out[20:])
    assert all(r.is_interpolated for r in out[:9] + out[20:])


def test_single_observation_fills_whole_month():
    obs = [ReadingPoint(date(2024, 1, 15), 3.5)]
    out = interpolate.interpolate_missing_days(obs, _jan(31))
    assert {r.value for r in out} == {3.5}
    assert sum(not r.is_interpolated for r in out) == 1


@pytest.mark.parametrize(
    "points",
    [
        [(1, 100.0), (9, 20.0), (20, 20.0), (31, 400.0)],
        [(2, -5.0), (3, 5.0), (30, 1.0)],
        [(5, 1.25), (6, 1.3), (25, 0.4)],
    ],
)
def test_observations_reproduced_and_estimates_bounded(points):
    obs = [ReadingPoint(date(2024, 1, d), v) for d, v in points]
    out = interpolate.interpolate_missing_days(obs, _jan(31))
    by_date = {r.date: r for r in out}

    for p in obs:
        assert by_date[p.date].value == p.value
        assert not by_date[p.date].is_interpolated

    for prev, nxt in zip(obs, obs[1:]):
        lo, hi = sorted((prev.value, nxt.value))
        d = prev.date + timedelta(days=1)
        while d < nxt.date:
            assert lo <= by_date[d].value <= hi
            d += timedelta(days=1)


def test_variation_only_touches_estimates():
    obs = [ReadingPoint(date(2024, 1, 1), 1000), ReadingPoint(date(2024, 1, 5), 1200)]
    out = interpolate.interpolate_missing_days(obs, _jan(5), add_variation=True)
    assert out[0].value == 1000 and out[4].value == 1200
    for r, base in zip(out[1:4], (1050, 1100, 1150)):
        assert r.value == pytest.approx(
            base + interpolate.meter_variation(r.date.isoformat())
        )


def test_variation_is_deterministic_and_bounded():
    for d in _jan(31):
        s = d.isoformat()
        first = interpolate.meter_variation(s)
        assert first == interpolate.meter_variation(s)
        assert -200.0 <= first <= 200.0


def test_seeded_random_unit_interval_and_long_seeds():
    # long seeds overflow the 32-bit hash and must still land in [0, 1)
    for seed in ("", "2024-01-01", "x" * 500, "2024-02-29T12:00:00"):
        r = interpolate.seeded_random(seed)
        assert 0.0 <= r < 1.0
    assert interpolate.seeded_random("") == 0.0


def test_variation_amplitude_scales():
    s = "2024-03-07"
    assert interpolate.meter_variation(s, amplitude=100.0) == pytest.approx(
        interpolate.meter_variation(s) / 2
    )


def test_days_in_month_handles_leap_year():
    feb = interpolate.days_in_month("2024-02")
    assert len(feb) == 29
    assert feb[0] == date(2024, 2, 1) and feb[-1] == date(2024, 2, 29)
    assert len(interpolate.days_in_month("2023-02")) == 28


def test_days_in_month_rejects_bad_month():
    with pytest.raises(exceptions.InvalidMonthError):
        interpolate.days_in_month("2024-13")
    with pytest.raises(exceptions.InvalidMonthError):
        interpolate.days_in_month("January")
