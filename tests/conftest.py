import os
import sys
import tempfile
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Must run before anything imports device_registry: importing the package
# creates the configured database.
_DATA_DIR = tempfile.mkdtemp(prefix="device-registry-tests-")
os.environ.setdefault("DATA_DIR", _DATA_DIR)
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_DATA_DIR}/test.db")
os.environ["ADMIN_PASSWORD"] = "letmein"
os.environ["ADMIN_PASSWORD_HASH"] = ""
os.environ["API_KEY"] = ""
os.environ["TZ"] = "Asia/Bangkok"
