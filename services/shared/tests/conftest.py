"""Test configuration for shared module tests."""

import os
import sys
from pathlib import Path

# Agrega el directorio services/ al path para importar shared
SERVICE_DIR = Path(__file__).resolve().parents[1]
ROOT_DIR = SERVICE_DIR.parent

services_path = str(ROOT_DIR)
if services_path not in sys.path:
    sys.path.insert(0, services_path)

# Sin Redis real durante las pruebas
os.environ["REDIS_URL"] = ""
