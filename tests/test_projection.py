from decimal import Decimal

from treasury_orchestrator.projection import project, yield_uplift


def test_six_month_projection_matches_simple_interest():
    points = project(250_000, Decimal("0.2"), Decimal("5.0"), 6)
    assert [p.month for p in points] == [1, 2, 3, 4, 5, 6]
    assert points[-1].alternative_cumulative == 6250
    assert points[-1].baseline_cumulative == 250
    assert points[0].label == "Month 1"
    assert points[0].alternative_cumulative == 1042  # 1041.67 rounded


def test_projection_is_linear_in_months():
    points = project(120_000, 0, 12, 24)
    assert len(points) == 24
    assert [p.alternative_cumulative for p in points] == [1_200 * n for n in range(1, 25)]
    assert all(p.baseline_cumulative == 0 for p in points)


def test_projection_clamps_inputs():
    assert len(project(1_000, 1, 2, 99)) == 24
    assert len(project(1_000, 1, 2, 0)) == 1
    assert project(-5, 1, 2, 1)[0].alternative_cumulative == 0


def test_yield_uplift():
    up = yield_uplift(250_000, Decimal("0.2"), Decimal("5.0"))
    assert up.rate_delta_pct == Decimal("4.8")
    assert up.annual == Decimal(12_000)
    assert up.monthly == Decimal(1_000)
    assert up.first_month == 1_000
