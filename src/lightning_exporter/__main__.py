import sys

from lightning_exporter.cli import main

if __name__ == "__main__":
    sys.exit(main())
