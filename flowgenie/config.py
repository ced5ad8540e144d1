"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite://"  # in-memory, lives as long as the process
    environment: str = "development"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000"]  # Next.js dev server

    # Auth
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 10080  # 7 days

    # Flow blockchain
    flow_network: str = "testnet"
    flow_access_node: str = "https://rest-testnet.onflow.org"
    flow_discovery_wallet: str = "https://fcl-discovery.onflow.org/testnet/authn"
    flow_mock_mode: bool = True
    flow_timeout_seconds: float = 30.0

    # Command interpreter: "keyword" or "completion"
    interpreter: str = "keyword"
    openai_api_key: str = ""
    openai_base_url: str | None = None
    openai_model: str = "gpt-4o-mini"

    model_config = {"env_prefix": "FG_", "env_file": ".env"}

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


settings = Settings()
