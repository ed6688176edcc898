"""
Services layer for the Golden AI gateway.

MODULES:
- ai/: Gateway, config resolution, provider client and task helpers
- settings_store: CMS key/value settings access
- embedding_search: Website semantic search client (copilot context)
- seo: Local SEO and JSON-LD checks

ARCHITECTURE:
1. Config: ai.config_service resolves profile > settings > env > defaults
2. Completion: ai.gateway tries candidate models in order via ai.provider
3. Tasks: ai.writing / ai.classification / ai.translation / ai.copilot
   build prompts and delegate to the gateway
"""
