# stock_analytics/tuning.py

from __future__ import annotations

from typing import Dict, List, Sequence

import pandas as pd
from sklearn.model_selection import GridSearchCV, ParameterGrid, ShuffleSplit

from .config import SPLIT_SEED


def prefixed_grid(param_grid: Dict[str, Sequence], step_name: str) -> Dict[str, List]:
    """Address each hyperparameter at a named pipeline step ('step__param')."""
    return {f"{step_name}__{name}": list(values) for name, values in param_grid.items()}


def train_validation_search(
    estimator,
    param_grid: Dict[str, Sequence],
    X: pd.DataFrame,
    y: pd.Series,
    train_ratio: float,
    scoring: str,
    step_name: str,
    seed: int = SPLIT_SEED,
) -> GridSearchCV:
    """
    Exhaustive grid search scored on ONE random train/validation split.

    Each combination is fitted once on `train_ratio` of the rows and scored on
    the rest; the winner is then refitted on all rows. Any fit error aborts
    the search.
    """
    grid = prefixed_grid(param_grid, step_name)
    if not grid or any(len(values) == 0 for values in grid.values()):
        raise ValueError(f"Hyperparameter grid {param_grid} has no combinations.")
    n_candidates = len(ParameterGrid(grid))

    split = ShuffleSplit(n_splits=1, train_size=train_ratio, random_state=seed)
    search = GridSearchCV(
        estimator,
        grid,
        scoring=scoring,
        cv=split,
        refit=True,
        error_score="raise",
    )

    print(
        f"[tuning] Searching {n_candidates} combinations on {len(X)} rows "
        f"(train ratio {train_ratio}, metric {scoring})..."
    )
    search.fit(X, y)

    for params, score in zip(
        search.cv_results_["params"], search.cv_results_["mean_test_score"]
    ):
        print(f"[tuning]   {params}: {score:.4f}")
    print(f"[tuning] Best: {search.best_params_} ({search.best_score_:.4f})")

    return search
