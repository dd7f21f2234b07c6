import sys

from plesk_webhook.main import main

sys.exit(main())
