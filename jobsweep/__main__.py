"""Allow ``python -m jobsweep``."""
from jobsweep.cli import main

if __name__ == "__main__":
    main()
