import sys

from musicglobe.ui.cli import main

if __name__ == "__main__":
    sys.exit(main())
