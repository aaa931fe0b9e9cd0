import sys

from pricing_oracle.app import main

sys.exit(main())
