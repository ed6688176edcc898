"""
AI Service Package

Provides a multi-model AI completion gateway with:
- Admin-managed provider profiles with environment fallback
- Short-lived cached config resolution
- Sequential fallback across free and configured models
- Thinking-tag sanitization of responses
- Vietnamese task helpers for the CMS editor and the customer copilot
"""

from golden_ai.services.ai.config_service import AIConfigService, ConfigCache
from golden_ai.services.ai.gateway import AIGateway, create_ai_gateway
from golden_ai.services.ai.provider import ChatProvider

__all__ = [
    "AIConfigService",
    "AIGateway",
    "ChatProvider",
    "ConfigCache",
    "create_ai_gateway",
]
