# Routes of the storage HTTP adapter, as proxied under /api by the web front.

BASE_URL = "http://localhost:8080"

STORAGE = {
    "readdir": {
        "method": "POST",
        "path": "/api/readdir/",
    },
    "mkdir": {
        "method": "POST",
        "path": "/api/mkdir/",
    },
    "remove": {
        "method": "POST",
        "path": "/api/remove/",
    },
    "upload": {
        "method": "POST",
        "path": "/api/upload/",
    },
    "download": {
        "method": "GET",
        "path": "/api/download/",
    },
}
