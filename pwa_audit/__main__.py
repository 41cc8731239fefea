import sys

from pwa_audit.cli.controller import main

if __name__ == "__main__":
    sys.exit(main())
