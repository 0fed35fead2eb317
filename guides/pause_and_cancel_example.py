"""Example driving the content-publishing preset by hand: pause, resume, cancel."""

import asyncio
import sys

from stepflow import SimulatedStepExecutor, WorkflowManager, get_preset


async def main():
    cancel = len(sys.argv) > 1 and sys.argv[1] == "--cancel"

    manager = WorkflowManager(
        get_preset("content-publishing"),
        SimulatedStepExecutor(failure_rate=0.2, speed=0.2),
        on_step_complete=lambda step_id, result: print(f"done: {step_id}"),
    )
    await manager.start()

    await asyncio.sleep(0.5)
    await manager.pause()
    print(f"paused at {manager.snapshot().percent_complete}%")
    await manager.resume()

    if cancel:
        await asyncio.sleep(0.3)
        await manager.cancel()

    snapshot = await manager.wait()
    print(snapshot.status.value, f"{snapshot.percent_complete}%")


if __name__ == "__main__":
    asyncio.run(main())
