import sys

from dxfmesh.cli import main

sys.exit(main())
