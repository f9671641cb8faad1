"""incusdash -- project settings and navigation for an Incus dashboard."""

__version__ = "0.1.0"
