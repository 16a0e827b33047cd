from __future__ import annotations

import uvicorn

from stash_api.shared.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "stash_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
