import sys

from amiigen.cli import main

sys.exit(main())
