"""Run a workflow programmatically with a custom adapter next to the built-ins."""

import asyncio

from glue import WorkflowEngine, build_default_registry, get_credential_store
from glue.adapters import AdapterAction, action_table
from glue.contracts import AdapterStep, LocalStep, Workflow


class EchoAdapter:
    """Prints the options it receives."""

    name = "echo"

    def __init__(self) -> None:
        self.actions = action_table(AdapterAction("say", self.say))

    async def say(self, options: dict) -> None:
        print(f"[echo] {options.get('message', '')}")


async def main() -> None:
    registry = build_default_registry(get_credential_store(backend="file"))
    registry.register(EchoAdapter())

    workflow = Workflow(
        when="demo",
        steps=[
            LocalStep(name="Show date", run="date"),
            AdapterStep(
                name="Say hello",
                adapter="echo",
                action="say",
                options={"message": "hello from glue"},
            ),
        ],
    )

    result = await WorkflowEngine(registry).execute(workflow)
    print("success:", result.success)
    for step in result.step_results:
        print(f"- {step.step_name}: {step.duration_ms} ms")


if __name__ == "__main__":
    asyncio.run(main())
