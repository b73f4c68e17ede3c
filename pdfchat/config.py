"""Application configuration with sensible defaults."""
import os
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
STORE_PATH = Path(os.getenv("STORE_PATH", str(DATA_DIR / "vectorstore.json")))

# Ollama configuration
OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
CHAT_MODEL = os.getenv("CHAT_MODEL", "llama3.1:8b")
EMBEDDING_MODEL = os.getenv("EMBEDDING_MODEL", "nomic-embed-text")
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "60.0"))
PROBE_TIMEOUT = float(os.getenv("PROBE_TIMEOUT", "5.0"))

# Chunking parameters (word-based)
CHUNK_SIZE = int(os.getenv("CHUNK_SIZE", "300"))           # words per chunk
CHUNK_OVERLAP = int(os.getenv("CHUNK_OVERLAP", "50"))      # words shared by neighbours
MIN_CHUNK_CHARS = int(os.getenv("MIN_CHUNK_CHARS", "20"))
MIN_SOURCE_CHARS = int(os.getenv("MIN_SOURCE_CHARS", "50"))

# Seconds to wait between embedding requests during ingestion
EMBED_REQUEST_DELAY = float(os.getenv("EMBED_REQUEST_DELAY", "0.1"))

# Retrieval & generation
RETRIEVAL_TOP_K = int(os.getenv("RETRIEVAL_TOP_K", "4"))
GENERATION_TEMPERATURE = float(os.getenv("GENERATION_TEMPERATURE", "0.2"))
GENERATION_TOP_K = int(os.getenv("GENERATION_TOP_K", "40"))
GENERATION_TOP_P = float(os.getenv("GENERATION_TOP_P", "0.9"))
ANSWER_LANGUAGE = os.getenv("ANSWER_LANGUAGE", "Italian")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
