"""Run the API with uvicorn: ``python -m voicecollections`` or ``voicecollections``."""

import uvicorn

from voicecollections.api.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "voicecollections.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.env == "dev",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
