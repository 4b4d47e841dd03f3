import os


def db_config_from_env(*, default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "od_tracker"),
        "connection_timeout": int(os.getenv("DB_CONNECT_TIMEOUT", "10")),
    }


# Shared defaults; environment modules override what differs.
MAX_ATTACHMENT_MB = int(os.getenv("MAX_ATTACHMENT_MB", "5"))
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@odzen.com")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
