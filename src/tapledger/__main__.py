import sys

from tapledger.cli import main

sys.exit(main())
