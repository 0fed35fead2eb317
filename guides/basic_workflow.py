"""Example running a small workflow with plain Python step handlers."""

import asyncio

from stepflow import FunctionStepExecutor, StepDefinition, WorkflowConfig, run_workflow


def fetch(step, context, cancel_signal):
    return {"rows": 3}


async def transform(step, context, cancel_signal):
    await asyncio.sleep(0.1)
    return {"rows": context.results["fetch"]["rows"] * 2}


async def main():
    workflow = WorkflowConfig(
        id="etl",
        name="Tiny ETL",
        steps=[
            StepDefinition(id="fetch", name="Fetch"),
            StepDefinition(id="transform", name="Transform", dependencies=["fetch"]),
        ],
    )
    executor = FunctionStepExecutor({"fetch": fetch, "transform": transform})

    snapshot = await run_workflow(workflow, executor, timeout=10)
    for entry in snapshot.logs:
        print(entry.level.value, entry.message)
    print(snapshot.status.value, snapshot.results)


if __name__ == "__main__":
    asyncio.run(main())
