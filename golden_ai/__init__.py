"""
Golden AI Gateway

AI-assist backend for the Golden Logistics CMS: multi-model fallback over
OpenAI-compatible providers, writing/classification helpers, a RAG customer
copilot and local SEO checks.
"""

__version__ = "0.1.0"
