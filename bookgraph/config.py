import typing

from pydantic_settings import BaseSettings, SettingsConfigDict

SERVICE_PORTS = {
    'gateway': 4000,
    'user': 4001,
    'listing': 4002,
    'messaging': 4003,
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', extra='ignore')

    # REST origin proxied by the subgraphs
    base_url: str = 'http://localhost:8080'

    host: str = '0.0.0.0'
    port: typing.Optional[int] = None

    upstream_timeout: float = 10.0
    upstream_retries: int = 2
    upstream_backoff: float = 0.2

    log_level: str = 'INFO'
    debug: bool = False
    playground: bool = True

    subgraph_urls: typing.Dict[str, str] = {
        'user': 'http://user-service:4001',
        'listing': 'http://listing-service:4002',
        'messaging': 'http://messaging-service:4003',
    }
    federation_version: str = '1'

    def port_for(self, service: str) -> int:
        return self.port or SERVICE_PORTS[service]


def get_settings(**overrides: typing.Any) -> Settings:
    return Settings(**overrides)
