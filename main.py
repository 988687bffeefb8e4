import sys

import uvicorn

from services.leadfinder.config import get_config


def main(host: str = "0.0.0.0"):
    """Serve the lead finder API on $PORT (default 3000)."""
    config = get_config()
    print(f"Server running on {config.port}")
    uvicorn.run("api.leadfinder.app:app", host=host, port=config.port)


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "0.0.0.0")
