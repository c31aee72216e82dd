"""Allow ``python -m chip8emu``."""

import sys

from chip8emu.main import main

sys.exit(main())
