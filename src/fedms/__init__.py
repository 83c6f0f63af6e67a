__version__ = '1.0.0'

from fedms.discovery import fetch_discovery_with_federation
from fedms.discovery import fetch_discovery_with_federation_async
from fedms.metadata_statement.resolve import resolve
from fedms.selector import select

__all__ = ["fetch_discovery_with_federation", "fetch_discovery_with_federation_async", "resolve",
           "select"]
