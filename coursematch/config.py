import os

# === Problem defaults ===
DEFAULT_CAPACITY = int(os.environ.get("COURSEMATCH_DEFAULT_CAPACITY", "1"))
DEFAULT_ORIENTATION = os.environ.get("COURSEMATCH_ORIENTATION", "applicant")

# Raise on disengaging a pair that is not engaged instead of ignoring it
STRICT_REGISTRY = os.environ.get("COURSEMATCH_STRICT", "").lower() in ("1", "true", "yes")

# === Logging ===
LOG_LEVEL = os.environ.get("COURSEMATCH_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# === Web service ===
SECRET_KEY = os.environ.get("COURSEMATCH_SECRET_KEY", "coursematch-dev-key")
PORT = int(os.environ.get("COURSEMATCH_PORT", "5001"))
ALLOWED_EXTENSIONS = (".csv", ".xlsx", ".xls")
