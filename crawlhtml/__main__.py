import sys

from crawlhtml.main import main

sys.exit(main())
