import sys

from retro_evm.cli import main

sys.exit(main())
