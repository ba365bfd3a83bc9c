"""Run the API server: python -m pos_ledger"""

import uvicorn

from pos_ledger.config import get_settings


def main():
    settings = get_settings()
    uvicorn.run(
        "pos_ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
