#!/usr/bin/env python3
"""
Run the classification API with the project root on the import path
"""

import sys
from pathlib import Path

# Add the project root to the import path
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import uvicorn
from ovclassifier.services.config import config

if __name__ == "__main__":
    cfg = config.load()
    api_config = cfg.get('api', {})

    uvicorn.run(
        "ovclassifier.services.api.main:app",
        host=api_config.get('host', '0.0.0.0'),
        port=api_config.get('port', 8000),
        reload=True
    )
