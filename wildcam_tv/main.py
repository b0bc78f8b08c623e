import asyncio

from wildcam_tv.common.logger import setup_logger
from wildcam_tv.container import create_app

logger = setup_logger("main")

async def main() -> None:
    app = create_app()
    logger.info("Starting stack service")
    try:
        await app.start()
    except KeyboardInterrupt:
        pass
    finally:
        await app.stop()

def run() -> None:
    asyncio.run(main())

if __name__ == "__main__":
    run()
