from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    port: int = 8081
    redis_url: str = ""
    redis_host: str = ""
    redis_port: int = 6379
    redis_password: str = ""
    log_level: str = "info"
    environment: str = "development"
    cors_origins: str = "*"

    # Upstream providers. Keys may also come from Docker secrets.
    neynar_api_key: str = ""
    talent_api_key: str = ""
    quotient_api_key: str = ""
    dune_api_key: str = ""

    neynar_base_url: str = "https://api.neynar.com"
    talent_base_url: str = "https://api.talentprotocol.com"
    openrank_base_url: str = "https://graph.cast.k3l.io"
    quotient_base_url: str = "https://api.quotient.social"
    dune_base_url: str = "https://api.dune.com/api/v1"
    dune_wallet_query_id: int = 3306581

    request_timeout_seconds: float = 10.0
    enrichment_timeout_seconds: float = 2.5
    max_batch_size: int = 100
    recent_cast_limit: int = 25
    inspection_cache_ttl: int = 300

    # Requests per client per window, by route.
    rate_limit_window_seconds: float = 60.0
    rate_limit_inspect: int = 30
    rate_limit_manual: int = 60
    rate_limit_following: int = 10
    rate_limit_reputation: int = 30

    model_config = {"env_file": ".env"}

    @staticmethod
    def _read_secret(secret_name: str, fallback: str) -> str:
        secret_path = Path(f"/run/secrets/{secret_name}")
        if secret_path.is_file():
            return secret_path.read_text().strip()
        return fallback

    def model_post_init(self, __context: object) -> None:
        self.neynar_api_key = self._read_secret("neynar_api_key", self.neynar_api_key)
        self.talent_api_key = self._read_secret("talent_api_key", self.talent_api_key)
        self.quotient_api_key = self._read_secret("quotient_api_key", self.quotient_api_key)
        self.dune_api_key = self._read_secret("dune_api_key", self.dune_api_key)

        # Redis is optional: only build a URL when a host was given.
        if not self.redis_url and self.redis_host:
            redis_pw = self._read_secret("redis_password", self.redis_password)
            if redis_pw:
                self.redis_url = f"redis://:{redis_pw}@{self.redis_host}:{self.redis_port}"
            else:
                self.redis_url = f"redis://{self.redis_host}:{self.redis_port}"


settings = Settings()
