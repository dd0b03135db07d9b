import asyncio
import logging
import sys
from typing import Dict, Optional, Sequence

from bootstrapper import config, environment
from bootstrapper.emitter import emit
from bootstrapper.errors import BootstrapError
from bootstrapper.reconcile import reconcile

logger = logging.getLogger(__name__)


async def bootstrap(settings: config.Settings) -> Optional[Dict[str, str]]:
    if environment.exists(settings.out):
        logger.info("etcd peers file %s already created, exiting.", settings.out)
        return None

    result = await reconcile(
        settings.me,
        settings.roster,
        settings.urls,
        settings.transport,
        force=settings.force,
    )
    params = emit(result)
    environment.write(params, settings.out)
    return params


def main(argv: Optional[Sequence[str]] = None):
    try:
        cfg = config.parse(argv)
        logging.basicConfig(level=config.log_level(cfg), stream=sys.stderr)
        settings = config.load(cfg)
        asyncio.run(bootstrap(settings))
    except BootstrapError as e:
        logging.basicConfig(stream=sys.stderr)
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
