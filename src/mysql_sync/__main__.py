"""Allow running as: python -m mysql_sync"""

from .main import main

if __name__ == "__main__":
    main()
