from dataclasses import dataclass
from typing import Optional

from app.config import Config, get_config
from app.services.gemini_client import GeminiClient
from app.services.resume_service import ResumeService


@dataclass
class ServiceContainer:
    """Services shared by all requests of one app instance."""
    config: Config
    ai_client: object
    resume_service: ResumeService


def build_services(config: Optional[Config] = None, ai_client=None) -> ServiceContainer:
    """Initialize services; ``ai_client`` overrides the Gemini client (tests)."""
    config = config or get_config()
    ai_client = ai_client or GeminiClient(config.gemini)
    return ServiceContainer(
        config=config,
        ai_client=ai_client,
        resume_service=ResumeService(config, ai_client),
    )
