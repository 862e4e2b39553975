import sys

from drone_cache_convert.gateway.main import main

sys.exit(main())
