"""funnelctl: funnel graph state engine and CLI."""

__version__ = "0.1.0"
