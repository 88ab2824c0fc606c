import sys

from .apt_scraper import main

sys.exit(main())
