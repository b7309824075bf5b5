import sys

from pitch_tuner.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
