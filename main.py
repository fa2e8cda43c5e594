"""
Family Chores: Entry Point.

`python main.py` loads the household's chores (remote first, local cache as
fallback), logs today's summary, and pushes any pending change before exit.
`python main.py CODE` joins the household with that sharing code first.
"""

import asyncio
import logging
import sys

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.adapters.app_factory import create_orchestrator

logger = logging.getLogger("family_chores")


async def run(code: str | None = None) -> None:
    orchestrator = create_orchestrator()
    await orchestrator.start()
    if code:
        await orchestrator.join(code)

    if not orchestrator.sharing_code:
        logger.info("No sharing code on this device. Run `python main.py CODE` to join a list.")
        return

    pending = orchestrator.visible_chores("pending")
    logger.info(
        "List %s: %d chores, %d pending",
        orchestrator.sharing_code, len(orchestrator.chores), len(pending),
    )
    for chore in pending:
        logger.info("  [ ] %s (%s, %s)", chore.title, chore.assignee, chore.frequency.value)

    await orchestrator.aclose()


def main() -> None:
    asyncio.run(run(sys.argv[1] if len(sys.argv) > 1 else None))


if __name__ == "__main__":
    main()
