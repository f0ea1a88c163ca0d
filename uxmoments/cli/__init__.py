"""
uxmoments command modules.

- analyze.py: scan recordings and join moments with analytics events
- config.py: show the effective configuration
- shared.py: colors, box drawing and logging setup
"""

from uxmoments.cli.analyze import analyze
from uxmoments.cli.config import config_show

__all__ = ["analyze", "config_show"]
