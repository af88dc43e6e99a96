import pytest

from progress_engine.config.settings import _default_level_thresholds
from progress_engine.xp.levels import LevelCurve


@pytest.fixture
def curve() -> LevelCurve:
    return LevelCurve([0, 80, 150])


@pytest.mark.parametrize(
    ("total_xp", "level"),
    [(0, 1), (79, 1), (80, 2), (149, 2), (150, 3), (10_000, 3)],
)
def test_level_for(curve: LevelCurve, total_xp: int, level: int) -> None:
    assert curve.level_for(total_xp) == level


def test_xp_to_next_level_and_progress(curve: LevelCurve) -> None:
    assert curve.xp_to_next_level(105) == 45
    assert curve.progress_to_next_level(105) == pytest.approx(100 * 25 / 70, abs=0.01)
    assert curve.progress_to_next_level(80) == 0


def test_top_of_table_is_capped(curve: LevelCurve) -> None:
    assert curve.xp_to_next_level(150) == 0
    assert curve.progress_to_next_level(999) == 100


@pytest.mark.parametrize("thresholds", [[], [10, 20], [0, 50, 50], [0, 80, 40]])
def test_rejects_malformed_tables(thresholds: list[int]) -> None:
    with pytest.raises(ValueError, match="Level thresholds"):
        LevelCurve(thresholds)


def test_default_curve_matches_triangular_formula() -> None:
    thresholds = _default_level_thresholds(5)
    assert thresholds == [0, 200, 500, 900, 1400]

    curve = LevelCurve(thresholds)
    assert curve.level_for(199) == 1
    assert curve.level_for(200) == 2
    assert curve.xp_to_next_level(250) == 250
