"""Package entry point for ``python -m fireflies_transcript``.

Delegates to the CLI's main() and exits with its return code.
"""

import sys

from fireflies_transcript.cli import main

if __name__ == "__main__":
    sys.exit(main())
