import sys

from photomaton.cli import main


sys.exit(main())
