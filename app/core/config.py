# app/core/config.py

import os
from dotenv import load_dotenv

# Caminho da raiz do projeto (onde está o main.py e o .env)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
ENV_PATH = os.path.join(BASE_DIR, ".env")

# Carrega variáveis do arquivo .env, se existir
if os.path.exists(ENV_PATH):
    load_dotenv(ENV_PATH)


def _split_csv(raw: str) -> list[str]:
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    def __init__(self) -> None:
        # SQLite por padrão se não houver .env
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL",
            "sqlite:///./terminal_storage.db",
        )

        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

        # Front (Next em localhost:3000)
        self.CORS_ORIGINS: list[str] = _split_csv(
            os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")
        )

        self.DEFAULT_CURRENCY: str = os.getenv("DEFAULT_CURRENCY", "BRL")

        # Cotação para converter o valor da carga para a moeda da regra
        self.EXCHANGE_API_URL: str = os.getenv(
            "EXCHANGE_API_URL",
            "https://economia.awesomeapi.com.br/json/last",
        )
        self.EXCHANGE_TIMEOUT_SECONDS: float = float(os.getenv("EXCHANGE_TIMEOUT_SECONDS", "10"))


settings = Settings()
