from dotenv import load_dotenv
import os

REQUIRED_VARS = ['DATABASE_URL', 'JWT_SECRET_KEY']


def init_env():
    """Initialize environment variables from .env file"""
    load_dotenv()

    missing_vars = [var for var in REQUIRED_VARS if not os.getenv(var)]

    if missing_vars:
        raise EnvironmentError(
            f"Missing required environment variables: {', '.join(missing_vars)}"
        )
