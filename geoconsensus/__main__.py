import sys

from geoconsensus.cli import main

sys.exit(main())
