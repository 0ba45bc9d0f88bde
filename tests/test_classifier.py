# tests/test_classifier.py

import numpy as np
import pandas as pd
import pytest

from stock_analytics.classifier import (
    DOWN,
    UNCHANGED,
    UP,
    build_classifier_pipeline,
    label_direction,
    run_logistic_predictor,
)
from stock_analytics.config import CLASSIFIER_PARAM_GRID, LABEL_COL
from stock_analytics.features import add_daily_return
from stock_analytics.storage import load_model


def test_label_direction_end_to_end(aapl_three_rows):
    df = label_direction(add_daily_return(aapl_three_rows))
    assert list(df[LABEL_COL]) == [UP, DOWN, UNCHANGED]


def test_label_direction_leaves_missing_return_unlabeled(aapl_three_rows):
    frame = aapl_three_rows.copy()
    frame.loc[1, "open"] = 0.0
    df = label_direction(add_daily_return(frame))

    assert df.loc[0, LABEL_COL] == UP
    assert pd.isna(df.loc[1, LABEL_COL])


def test_label_direction_covers_every_sign(derived):
    df = label_direction(derived)
    ret = df["dailyReturn_%"]

    assert (df.loc[ret > 0, LABEL_COL] == UP).all()
    assert (df.loc[ret < 0, LABEL_COL] == DOWN).all()
    assert (df.loc[ret == 0, LABEL_COL] == UNCHANGED).all()
    assert df[LABEL_COL].notna().all()


def test_build_classifier_pipeline_from_formula(derived):
    pipeline, label, predictors = build_classifier_pipeline(label_direction(derived))

    assert label == LABEL_COL
    assert predictors == ["date", "open", "high", "low", "close", "volume", "ticker", "dailyReturn_%"]
    assert [name for name, _ in pipeline.steps] == ["formula", "classifier"]


def test_run_logistic_predictor(tmp_path, derived):
    model_dir = tmp_path / "modelLocation"
    result = run_logistic_predictor(derived, print_lines=5, model_dir=model_dir)

    assert 0.0 <= result.accuracy <= 1.0
    assert result.best_params["elastic_net_param"] in CLASSIFIER_PARAM_GRID["elastic_net_param"]
    assert result.best_params["reg_param"] in CLASSIFIER_PARAM_GRID["reg_param"]
    assert result.n_train + result.n_test == len(derived)
    assert len(result.predictions) == result.n_test
    assert set(result.predictions["predictedChange"]) <= {UP, DOWN, UNCHANGED}

    model, metadata = load_model(model_dir)
    assert metadata.kind == "classifier"
    assert metadata.test_accuracy == pytest.approx(result.accuracy)
    assert metadata.target_column == LABEL_COL

    test_rows = result.predictions[result.predictors]
    np.testing.assert_array_equal(model.predict(test_rows), result.predictions["predictedChange"])


def test_run_logistic_predictor_drops_unlabeled_rows(tmp_path, prices):
    frame = prices.copy()
    frame.loc[5, "open"] = 0.0
    result = run_logistic_predictor(add_daily_return(frame), model_dir=tmp_path / "m")

    assert result.n_train + result.n_test == len(frame) - 1


def test_formula_with_missing_column_is_fatal(tmp_path, derived):
    model_dir = tmp_path / "modelLocation"
    with pytest.raises(KeyError):
        run_logistic_predictor(derived, formula="change ~ open + sentiment", model_dir=model_dir)
    assert not model_dir.exists()


def test_empty_grid_is_fatal(tmp_path, derived):
    model_dir = tmp_path / "modelLocation"
    with pytest.raises(ValueError):
        run_logistic_predictor(
            derived,
            param_grid={"elastic_net_param": [], "reg_param": [0.1]},
            model_dir=model_dir,
        )
    assert not model_dir.exists()


def test_prediction_uses_the_same_index_as_label(tmp_path, derived):
    result = run_logistic_predictor(derived, model_dir=tmp_path / "m")
    predictions = result.predictions

    assert predictions["prediction"].dtype == float
    assert predictions["label"].dtype == float
    # a correct prediction has the same index as its label
    hits = predictions["predictedChange"] == predictions[LABEL_COL]
    assert (predictions.loc[hits, "prediction"] == predictions.loc[hits, "label"]).all()


def test_every_day_up_gives_constant_prediction(tmp_path, prices):
    frame = prices.copy()
    frame["close"] = frame["open"] * 1.01
    result = run_logistic_predictor(add_daily_return(frame), model_dir=tmp_path / "m")

    assert result.accuracy == 1.0
    assert set(result.predictions["predictedChange"]) == {UP}
    assert (result.predictions["prediction"] == 0.0).all()

    model, _ = load_model(tmp_path / "m")
    assert list(model.classes_) == [UP]


def test_three_row_history(tmp_path, aapl_three_rows):
    result = run_logistic_predictor(add_daily_return(aapl_three_rows), model_dir=tmp_path / "m")

    assert result.n_train == 2
    assert result.n_test == 1
    # the only test day is UNCHANGED, which training never saw
    assert result.predictions[LABEL_COL].tolist() == [UNCHANGED]
    assert result.accuracy == 0.0
    assert (tmp_path / "m" / "model.joblib").is_file()
