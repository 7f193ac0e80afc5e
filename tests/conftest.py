import os
import sys

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Set logging env before importing any src module: no log files from tests
os.environ.setdefault("LOG_FILES", "false")
os.environ.setdefault("LOG_CONSOLE", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Real keys in the developer's shell must not leak into tests
for _var in (
    "MEDIASTACK_KEY_1",
    "MEDIASTACK_KEY_2",
    "MEDIASTACK_KEY_3",
    "GUARDIAN_KEY_1",
    "GNEWS_API_KEY",
    "NEWSDATA_API_KEY",
):
    os.environ.pop(_var, None)
