"""Configuration read from the environment.

Constructor arguments on the client always win over these values.
"""

import os

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (X11; Ubuntu; Linux x86_64; rv:15.0) "
    "Gecko/20100101 Firefox/15.0.1"
)

SAUCENAO_API_KEY = os.getenv("SAUCENAO_API_KEY", "")
IMGUR_CLIENT_ID = os.getenv("IMGUR_CLIENT_ID", "")
USER_AGENT = os.getenv("REVERSE_SEARCH_USER_AGENT", "") or DEFAULT_USER_AGENT
TIMEOUT = float(os.getenv("REVERSE_SEARCH_TIMEOUT", "30"))

SAUCENAO_URL = "https://saucenao.com/search.php"
IQDB_URL = "http://www.iqdb.org"
IMGUR_IMAGE_URL = "https://api.imgur.com/3/image"
