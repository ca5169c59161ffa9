import requests
from requests.adapters import HTTPAdapter
from urllib3.util import Retry

# ---------- HTTP session global com pool + retry ----------
SESSION = requests.Session()
_RETRY = Retry(
    total=3,
    backoff_factor=0.3,
    status_forcelist=(429, 500, 502, 503, 504),
    allowed_methods=frozenset({"GET", "POST"}),
    raise_on_status=False,
)
_ADAPTER = HTTPAdapter(pool_connections=4, pool_maxsize=10, max_retries=_RETRY)
SESSION.mount("https://", _ADAPTER)
SESSION.mount("http://", _ADAPTER)
SESSION.headers.update({"User-Agent": "Chronos/1.0 (+https://localhost)"})

TIMEOUT = 10
