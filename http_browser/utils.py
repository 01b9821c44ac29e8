import time
import urllib.parse
from json import dumps
from sys import platform
from typing import Dict, Optional, Tuple, Union

if platform == "win32":
    preferred_clock = time.perf_counter
else:
    preferred_clock = time.time


def host_url(url: str) -> str:
    """Returns scheme, host and port of ``url`` without path, query or credentials."""
    parts = urllib.parse.urlsplit(url)
    netloc = parts.netloc.rpartition("@")[2]
    return f"{parts.scheme}://{netloc}"


def prepare_url(url: str, params: Optional[Dict] = None) -> str:
    if not params:
        return url
    separator = "&" if urllib.parse.urlsplit(url).query else "?"
    return f"{url}{separator}{urllib.parse.urlencode(params, doseq=True)}"


def prepare_request_body(data: Optional[Union[str, bytes, dict]] = None,
                         json: Optional[Union[dict, list]] = None
                         ) -> Tuple[Optional[Union[str, bytes]], Optional[str]]:
    if data is None and json is not None:
        if type(json) in [dict, list]:
            json = dumps(json)
        return json, "application/json"
    elif data is not None and type(data) not in [str, bytes]:
        return urllib.parse.urlencode(data, doseq=True), "application/x-www-form-urlencoded"
    return data, None
