"""WSL installer bootstrapper (probe-driven, reboot-safe).

Core design goals:
- Probe before acting; never trust a saved offset
- Idempotent steps, safe to re-run from the top
- One structured outcome per run
- Survive the feature-enable reboot via a resume marker
- Centralized logging
"""

__all__ = []
