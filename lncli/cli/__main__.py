"""Allow ``python -m lncli.cli`` execution."""

from lncli.cli.reader import main

main()
