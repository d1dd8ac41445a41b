"""Interactive launcher for Playwright codegen and AI-assisted test authoring."""

__version__ = "0.1.0"
