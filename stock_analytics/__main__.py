# stock_analytics/__main__.py

from .pipeline import main

if __name__ == "__main__":
    main()
