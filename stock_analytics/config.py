# stock_analytics/config.py

from pathlib import Path

# Resources live relative to the working directory the batch job runs from
RESOURCES_DIR = Path("src") / "resources"
DEFAULT_INPUT_PATH = RESOURCES_DIR / "stock_prices_.csv"

# Output locations (all overwritten on every run)
PARQUET_DIR = RESOURCES_DIR / "parquet"
CSV_DIR = RESOURCES_DIR / "csv"
MODELS_DIR = RESOURCES_DIR / "tmp"

AVERAGES_PARQUET_PATH = PARQUET_DIR / "averages.parquet"
AVERAGES_CSV_PATH = CSV_DIR / "averages.csv"
VOLATILITY_PARQUET_PATH = PARQUET_DIR / "volatility.parquet"
VOLATILITY_CSV_PATH = CSV_DIR / "volatility.csv"

CLASSIFIER_MODEL_DIR = MODELS_DIR / "modelLocation"
REGRESSOR_MODEL_DIR = MODELS_DIR / "linearRegressionModelLocation"

MODEL_FILENAME = "model.joblib"
METADATA_FILENAME = "metadata.json"

# Input schema
REQUIRED_COLUMNS = ["date", "open", "high", "low", "close", "volume", "ticker"]
DATE_FORMAT = "yyyy-MM-dd"

# Derived columns
DAILY_RETURN_COL = "dailyReturn_%"
TRADED_VALUE_COL = "frequency"
LABEL_COL = "change"

# Statistics
TRADING_DAYS_PER_YEAR = 252
TRAIN_RANK_THRESHOLD = 0.7

# How many rows each console view prints
DEFAULT_PRINT_LINES = 20
DETAIL_PRINT_LINES = 10
PARTITION_PRINT_LINES = 30

# Classifier (UP / DOWN / UNCHANGED)
CLASSIFIER_FORMULA = f"{LABEL_COL} ~ ."
CLASSIFIER_PARAM_GRID = {
    "elastic_net_param": [0.0, 0.5, 1.0],
    "reg_param": [0.1, 2.0],
}
CLASSIFIER_TRAIN_RATIO = 0.7

# Regressor (next close price)
# NOTE: "close" is both a predictor and the target here.
REGRESSOR_TARGET_COL = "close"
REGRESSOR_FEATURE_COLUMNS = [
    "encodedIndexedDate",
    "open", "close", "high", "low", "volume",
    "indexedTicker",
    DAILY_RETURN_COL,
]
REGRESSOR_PARAM_GRID = {
    "reg_param": [0.1, 0.3, 0.5, 0.7],
}
REGRESSOR_TRAIN_RATIO = 0.75

# Shared fitting settings
SPLIT_SEED = 42
MAX_ITER = 1000
