"""Allow ``python -m jtlreport``."""

from jtlreport.cli import main

if __name__ == "__main__":
    main()
