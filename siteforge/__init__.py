"""SiteForge: describe a website, let an AI agent build and redeploy it."""

__version__ = "1.0.0"
