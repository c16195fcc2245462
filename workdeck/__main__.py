"""Entry point: python -m workdeck"""

from .cli import main

if __name__ == "__main__":
    main()
