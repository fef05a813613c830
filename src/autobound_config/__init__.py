from .settings import (
    Credentials,
    HttpSettings,
    ProviderUrls,
    ServerSettings,
    init_runtime,
)

__all__ = ["Credentials", "HttpSettings", "ProviderUrls", "ServerSettings", "init_runtime"]
