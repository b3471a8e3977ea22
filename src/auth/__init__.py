from enum import Enum

from .api_key import ApiKeyAuthWireguardManagerAPI
from .unauthenticated import WireguardManagerAPI


class AuthProvider(str, Enum):
    NONE = "none"
    API_KEY = "api-key"
