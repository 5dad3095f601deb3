import json
from functools import lru_cache
from typing import Annotated, Any, List, Optional, Union

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "HR Desk"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:5173"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, str):
            return json.loads(v)
        elif isinstance(v, list):
            return v
        raise ValueError(v)

    # Session token
    ACCESS_TOKEN_SECRET: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    COOKIE_NAME: str = "token"

    MYSQL_USER: str = "hrdesk"
    MYSQL_PASSWORD: str = "hrdesk"
    MYSQL_HOST: str = "localhost"
    MYSQL_PORT: str = "3306"
    MYSQL_DATABASE: str = "hrdesk"
    DATABASE_URI: Optional[str] = None
    STORE_TIMEOUT_SECONDS: int = 5

    @field_validator("ENVIRONMENT")
    @classmethod
    def check_environment(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("development", "production"):
            raise ValueError("ENVIRONMENT must be 'development' or 'production'")
        return v

    @model_validator(mode="after")
    def assemble_db_connection(self) -> "Settings":
        if not self.DATABASE_URI:
            self.DATABASE_URI = (
                f"mysql+pymysql://{self.MYSQL_USER}:{self.MYSQL_PASSWORD}@{self.MYSQL_HOST}:"
                f"{self.MYSQL_PORT}/{self.MYSQL_DATABASE}"
            )
        return self

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def cookie_options(self) -> dict[str, Any]:
        """Attributes shared by the session cookie when it is set and cleared."""
        if self.is_production:
            return {"httponly": True, "secure": True, "samesite": "none"}
        return {"httponly": True, "secure": False, "samesite": "strict"}

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
