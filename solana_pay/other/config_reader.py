import os
from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

start_path = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
dotenv_path = os.path.join(start_path, '.env')


class Settings(BaseSettings):
    # JSON-RPC endpoint used to resolve SPL token mint decimals
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    rpc_timeout: float = 10.0
    rpc_commitment: str = "confirmed"
    # sent as a bearer token for providers that require one
    rpc_token: Optional[SecretStr] = None

    log_level: str = "INFO"
    log_file: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=dotenv_path,
        env_file_encoding='utf-8',
        env_prefix='SOLANA_PAY_',
        extra='ignore',
        case_sensitive=False,
    )


config = Settings()
