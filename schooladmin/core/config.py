from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    # App
    app_name: str = "School Admin Access Control"
    debug: bool = False

    # Logging
    log_level: str = "INFO"
    log_dir: str = "/var/log/schooladmin"
    log_to_file: bool = False

    # Access levels
    access_levels_file: Optional[str] = None  # YAML seed with an access_levels list
    seed_predefined_levels: bool = False
    system_user: str = "system"

    # Roles with no module access at all, regardless of assigned access level
    denied_roles: str = "Parent"

    @property
    def denied_roles_list(self) -> list[str]:
        return [role.strip() for role in self.denied_roles.split(",") if role.strip()]

    model_config = SettingsConfigDict(
        env_prefix="SCHOOLADMIN_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
