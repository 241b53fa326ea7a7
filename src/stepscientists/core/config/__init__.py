"""
Configuration subsystem for Step Scientists.

Static configuration only: values are read from environment variables
(with .env support) at startup. Game balance lives in
stepscientists.modules.shared.constants, not here.

Usage
-----
```python
from stepscientists.core.config import Config

db_url = Config.DATABASE_URL
if Config.is_production():
    logger.info("Running in production mode")
```
"""

from stepscientists.core.config.config import Config, Environment

__all__ = [
    "Config",
    "Environment",
]
