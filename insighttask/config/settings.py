"""
Application settings and configuration
"""

import os
from pathlib import Path
from dotenv import load_dotenv
from typing import Optional

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings:
    """Application settings loaded from environment variables"""

    # Supabase (REST store + realtime feed)
    SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
    SUPABASE_ANON_KEY: str = os.getenv("SUPABASE_ANON_KEY", "")
    SUPABASE_ACCESS_TOKEN: Optional[str] = os.getenv("SUPABASE_ACCESS_TOKEN", None)

    # AI summary (OpenAI-compatible completion API)
    XAI_API_KEY: str = os.getenv("XAI_API_KEY", "")
    AI_BASE_URL: str = os.getenv("AI_BASE_URL", "https://api.x.ai/v1")
    AI_MODEL: str = os.getenv("AI_MODEL", "grok-4")

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_TO_FILE: bool = os.getenv("LOG_TO_FILE", "true").lower() == "true"

    @classmethod
    def validate(cls) -> bool:
        """Validate that all required settings are present"""
        required = {
            "SUPABASE_URL": cls.SUPABASE_URL,
            "SUPABASE_ANON_KEY": cls.SUPABASE_ANON_KEY,
        }

        missing = [name for name, value in required.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        return True


# Global settings instance
settings = Settings()
