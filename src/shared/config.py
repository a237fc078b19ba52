from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    APP_NAME: str = "Webhook TLS Manager"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"  # noqa: S104
    PORT: int = 8443

    # Key generation
    TLS_KEY_SIZE: int = 2048

    # Rotation policy (half of the assumed one-year certificate lifetime)
    TLS_RESERVE_WINDOW_DAYS: int = 180

    # Signing request
    TLS_SIGNER_GROUPS: str = "system:masters,system:authenticated"
    TLS_USE_FQDN_AS_COMMON_NAME: bool = False
    TLS_CSR_API_VERSION: str = "certificates.k8s.io/v1beta1"

    @property
    def signer_groups(self) -> tuple[str, ...]:
        return tuple(g.strip() for g in self.TLS_SIGNER_GROUPS.split(",") if g.strip())


settings = Settings()
