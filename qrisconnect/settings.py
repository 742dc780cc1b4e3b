from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "QrisConnect"
    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    PORT: int = 8080

    # Outbound HTTP
    QRIS_HTTP_TIMEOUT_SEC: float = 20
    QRIS_HTTP_RETRY_MAX: int = 1

    # Default provider selection
    DEFAULT_PROVIDER: str = "BNI"

    # Provider: BNI
    BNI_HOST: str = "https://mom-trxauth.spesandbox.com"
    BNI_USERNAME: str = ""
    BNI_PASSWORD: str = ""
    BNI_CLIENT_ID: str = ""
    BNI_CLIENT_SECRET: str = ""
    BNI_HMAC_KEY: str = ""
    BNI_MERCHANT_ID: str = ""
    BNI_TERMINAL_ID: str = ""

    # --- BRI MPM Dynamic ---
    BRI_MPM_HOST: str = "https://sandbox.partner.api.bri.co.id"
    BRI_MPM_CLIENT_ID: str = ""
    BRI_MPM_CLIENT_SECRET: str = ""
    BRI_MPM_PARTNER_ID: str = ""
    # PEM text wins over the file path when both are set
    BRI_MPM_PRIVATE_KEY: str = ""
    BRI_MPM_PRIVATE_KEY_PATH: str = ""
    BRI_MPM_MERCHANT_ID: str = ""
    BRI_MPM_TERMINAL_ID: str = ""
    BRI_MPM_CHANNEL_ID: str = ""
    BRI_MPM_TIMEZONE: str = ""

settings = Settings()
