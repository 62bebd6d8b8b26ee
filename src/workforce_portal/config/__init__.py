import os


def get_settings_module() -> str:
    # Pick the settings module from APP_ENV; development is the default
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "workforce_portal.config.production"

    if env in {"test", "testing"}:
        return "workforce_portal.config.testing"

    return "workforce_portal.config.development"
