"""Building blocks for NixOS deployments: jobs, goals, limits, options, expressions and flakes."""

__version__ = "0.5.0.dev0"