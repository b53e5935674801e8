import pytest
import numpy as np
import pandas as pd

from f1_finish.modules.features import FEATURE_SET, assemble_features, build_entity_ratings
from f1_finish.modules.model import F1FinishPredictor, ModelNotReady, to_position


@pytest.fixture
def table():
    return pd.DataFrame({
        "driver": ["hamilton", "hamilton", "max_verstappen", "max_verstappen", "russell", "russell"],
        "constructor": ["mercedes", "mercedes", "red_bull", "red_bull", "mercedes", "williams"],
        "circuit": ["Silverstone", "Monza", "Silverstone", "Monza", "Monza", "Silverstone"],
        "position": [1, 3, 2, 1, 8, 15],
        "year": [2021, 2021, 2021, 2021, 2022, 2020],
    })


def _features(year, driver_perf, const_perf, circuit_perf):
    return pd.DataFrame(
        [{"year": year, "driver_perf": driver_perf, "const_perf": const_perf, "circuit_perf": circuit_perf}],
        columns=FEATURE_SET,
    )


def test_infer_before_train_raises():
    predictor = F1FinishPredictor()
    assert not predictor.is_trained
    with pytest.raises(ModelNotReady):
        predictor.infer(_features(2023, 2.0, 3.0, 4.0))


def test_train_only_once(table):
    ratings = build_entity_ratings(table)
    predictor = F1FinishPredictor().train(table, ratings)
    assert predictor.is_trained
    with pytest.raises(RuntimeError, match="Already Trained"):
        predictor.train(table, ratings)


def test_unknown_backend():
    with pytest.raises(ValueError):
        F1FinishPredictor(backend="svm")


def test_train_on_empty_table(table):
    ratings = build_entity_ratings(table)
    with pytest.raises(ValueError):
        F1FinishPredictor().train(table.iloc[0:0], ratings)


def test_single_row_round_trip():
    table = pd.DataFrame({
        "driver": ["hamilton"],
        "constructor": ["mercedes"],
        "circuit": ["Silverstone"],
        "position": [1],
        "year": [2023],
    })
    ratings = build_entity_ratings(table)
    predictor = F1FinishPredictor().train(table, ratings)
    features = assemble_features(
        "hamilton", "mercedes", "Silverstone", 2023,
        ratings.drivers, ratings.constructors, ratings.circuits,
    )
    assert predictor.infer(features) == 1


@pytest.mark.parametrize("row", [
    (2023, 1.0, 1.0, 1.0),
    (1950, 20.0, 20.0, 20.0),
    (2100, 0.5, 30.0, 7.25),
    (0, -5.0, 0.0, 1e6),
])
def test_infer_is_positive_integer(table, row):
    ratings = build_entity_ratings(table)
    predictor = F1FinishPredictor().train(table, ratings)
    position = predictor.infer(_features(*row))
    assert isinstance(position, int)
    assert position >= 1


def test_feature_importances_cover_feature_set(table):
    ratings = build_entity_ratings(table)
    predictor = F1FinishPredictor().train(table, ratings)
    importances = predictor.feature_importances()
    assert list(importances) == FEATURE_SET
    assert sum(importances.values()) == pytest.approx(1.0)


def test_to_position_clamps_and_rounds_half_even():
    assert to_position(-3.2) == 1
    assert to_position(0.4) == 1
    assert to_position(2.5) == 2
    assert to_position(3.5) == 4
    assert to_position(7.6) == 8
    assert isinstance(to_position(np.float64(4.2)), int)


def test_mlp_backend(table):
    ratings = build_entity_ratings(table)
    predictor = F1FinishPredictor(backend="mlp").train(table, ratings)
    position = predictor.infer(_features(2021, 2.0, 4.0, 4.0))
    assert isinstance(position, int)
    assert position >= 1
    assert predictor.feature_importances() == {}
