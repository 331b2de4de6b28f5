from __future__ import annotations

import os

import uvicorn


def main() -> None:
    # 5000 matches the port the browser form posts to
    uvicorn.run(
        "file_gateway.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").lower(),
    )


if __name__ == "__main__":
    main()
