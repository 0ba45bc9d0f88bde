# scripts/run_analysis.py

from __future__ import annotations

from stock_analytics.pipeline import main


if __name__ == "__main__":
    main()
