"""mcwrapper launcher for running from a source checkout."""

from mcwrapper.cli import main

if __name__ == "__main__":
    main()
