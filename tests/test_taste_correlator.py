from shotcoach.core.constants import TastePrimary
from shotcoach.services.taste_correlator import (
    extraction_time_deviation,
    is_optimal_extraction_time,
    predict_taste,
)


def test_predict_taste_bands() -> None:
    assert predict_taste(18) == TastePrimary.SOUR
    assert predict_taste(24) == TastePrimary.SOUR
    assert predict_taste(25) == TastePrimary.PERFECT
    assert predict_taste(30) == TastePrimary.PERFECT
    assert predict_taste(31) == TastePrimary.BITTER


def test_predict_taste_without_usable_time() -> None:
    assert predict_taste(None) is None
    assert predict_taste(0) is None
    assert predict_taste(-4) is None


def test_extraction_time_deviation_is_signed_from_nearest_edge() -> None:
    assert extraction_time_deviation(18) == -7
    assert extraction_time_deviation(24) == -1
    assert extraction_time_deviation(27) == 0
    assert extraction_time_deviation(40) == 10
    assert extraction_time_deviation(None) == 0


def test_is_optimal_extraction_time() -> None:
    assert is_optimal_extraction_time(27)
    assert not is_optimal_extraction_time(35)
    assert not is_optimal_extraction_time(None)
