import sys

from anonymization.cli import main

sys.exit(main())
