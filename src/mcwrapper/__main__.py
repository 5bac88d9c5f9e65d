"""Allow ``python -m mcwrapper``."""

from mcwrapper.cli import main

main()
