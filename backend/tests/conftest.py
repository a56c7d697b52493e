import os
import sys


# Put backend/ on sys.path so tests can import prompt_gateway without an editable install.
_BACKEND_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _BACKEND_ROOT not in sys.path:
    sys.path.insert(0, _BACKEND_ROOT)

# Settings require these at startup; tests never reach AWS.
os.environ.setdefault("AWS_ACCESS_KEY_ID", "test-access-key")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "test-secret-key")
os.environ.setdefault("AWS_URL", "https://bedrock-runtime.eu-west-1.amazonaws.com")
