import sys

from .CommandLine import main


sys.exit(main())
