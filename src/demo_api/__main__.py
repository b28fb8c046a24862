"""Run the XOR demo API with uvicorn."""

import os

import uvicorn

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def main():
    """Start the demo API server. Host and port come from XOR_DEMO_HOST and XOR_DEMO_PORT."""
    host = os.environ.get("XOR_DEMO_HOST", DEFAULT_HOST)
    port = int(os.environ.get("XOR_DEMO_PORT", DEFAULT_PORT))
    uvicorn.run("demo_api.api:app", host=host, port=port)


if __name__ == "__main__":
    main()
