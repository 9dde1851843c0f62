"""Tripletex client runtime.

Hand-written runtime for generated Tripletex API clients:
- Session token lifecycle (issue, cache, expire, refresh) and request auth
- Fluent builder for the `fields` query parameter
- Rate-limit aware retry transport
- Tripletex error document handling

Example:
    ```python
    from tripletex_client import Credentials, FieldsBuilder, TripletexClient

    credentials = Credentials(consumer_token="...", employee_token="...")
    async with TripletexClient(credentials) as client:
        fields = FieldsBuilder().all().group("orders", "id", FieldsBuilder().group("project", "id"))
        response = await client.get("/order", params={"orderDateFrom": "2024-01-01"}, fields=fields)
    ```
"""

from tripletex_client.auth import Credentials, Token, TokenManager, TripletexAuth
from tripletex_client.client import TripletexClient
from tripletex_client.config import ClientConfig
from tripletex_client.fields import FieldsBuilder, fields_to_string

__version__ = "0.1.0"

__all__ = [
    "ClientConfig",
    "Credentials",
    "FieldsBuilder",
    "Token",
    "TokenManager",
    "TripletexAuth",
    "TripletexClient",
    "__version__",
    "fields_to_string",
]
