import logging  # ← 最初

import config

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s [%(levelname)s] %(name)s - %(funcName)s:%(lineno)d - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
    handlers=[
        logging.StreamHandler(),
    ]
)

logger = logging.getLogger("rpgcombat")
if config.VERBOSE_DEBUG:
    logger.setLevel(logging.DEBUG)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.INFO)
logging.getLogger("aiohttp.access").setLevel(logging.INFO)

import asyncio

from aiohttp import web

from rpg.store import build_store
from settings.runtime import HTTP_HOST, HTTP_PORT
from api import create_app


async def run_server(host: str = HTTP_HOST, port: int = HTTP_PORT):
    store = build_store()
    app = create_app(store)
    runner = web.AppRunner(app)
    await runner.setup()

    try:
        site = web.TCPSite(runner, host, port)
        await site.start()
        logger.info("✅ HTTPサーバーを起動しました (%s:%s)", host, port)
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()
        logger.info("✅ HTTPサーバーを停止しました")


def main():
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
