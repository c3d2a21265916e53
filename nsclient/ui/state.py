from dataclasses import dataclass
from typing import Optional

from ..browser import Navigator
from ..client import StorageClient


@dataclass
class AppState:
    client: Optional[StorageClient] = None
    navigator: Optional[Navigator] = None
