import os

# Settings are read at import time; keep test runs off the local database file and the live model
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OPENAI_API_KEY"] = ""
