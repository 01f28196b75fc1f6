"""Example demonstrating the ChainsPlugin REST API endpoints.

This example mounts the chains API on a Litestar application and seeds a
two-step "summarize then translate" workflow backed by a local Ollama server.

Run this example with:
    uv run python examples/web_api_example.py

Then access the API at:
    - http://localhost:8000/chains/workflows - List workflows
    - http://localhost:8000/chains/model-cards - List model cards
    - http://localhost:8000/chains/providers - List LLM providers
    - http://localhost:8000/schema - OpenAPI documentation

Run the seeded workflow with:
    curl http://localhost:8000/chains/workflows
    curl -X POST http://localhost:8000/chains/workflows/<id>/execute -d '{"input": "..."}'
"""

from __future__ import annotations

from litestar import Litestar
from litestar.openapi import OpenAPIConfig

from litestar_chains import ChainsPlugin, ChainsPluginConfig, ChainsSettings
from litestar_chains.core.models import NumberParameter
from litestar_chains.core.types import LLMProvider

plugin = ChainsPlugin(
    config=ChainsPluginConfig(
        settings=ChainsSettings(default_provider=LLMProvider.OLLAMA),
        api_tags=["Chains API"],
    )
)


async def seed_workflow() -> None:
    """Create the demo model cards and chain them into a workflow."""
    summarizer = await plugin.model_cards.create_model_card(
        name="Summarizer",
        system_prompt="Summarize the following text in three sentences.",
        llm_provider=LLMProvider.OLLAMA,
        llm_model="llama3",
        parameters=[NumberParameter(id="temperature", name="temperature", value=0.2)],
    )
    translator = await plugin.model_cards.create_model_card(
        name="Translator",
        system_prompt="Translate the following text to French.",
        llm_provider=LLMProvider.OLLAMA,
        llm_model="llama3",
    )

    workflow = await plugin.registry.create_workflow("Summarize and translate")
    await plugin.registry.add_model_card(workflow.id, summarizer)
    await plugin.registry.add_model_card(workflow.id, translator)
    await plugin.registry.create_connection(workflow.id, summarizer.id, translator.id)


# Configure the application
def create_app() -> Litestar:
    """Create and configure the Litestar application.

    Returns:
        Configured Litestar application with the chains plugin.
    """
    return Litestar(
        plugins=[plugin],
        on_startup=[seed_workflow],
        openapi_config=OpenAPIConfig(
            title="LLM Chains API",
            version="1.0.0",
            description="REST API for building and running sequential LLM workflows",
        ),
        debug=True,
    )


if __name__ == "__main__":
    import uvicorn

    app = create_app()

    print("\n" + "=" * 80)
    print("LLM Chains API Server")
    print("=" * 80)
    print("\nAvailable endpoints:")
    print("  • http://localhost:8000/schema - OpenAPI documentation")
    print("  • http://localhost:8000/chains/workflows - List workflows")
    print("  • http://localhost:8000/chains/model-cards - List model cards")
    print("  • http://localhost:8000/chains/executions/history - List past runs")
    print("  • http://localhost:8000/chains/providers - List LLM providers")
    print("\nStarting server on http://localhost:8000")
    print("=" * 80 + "\n")

    uvicorn.run(app, host="0.0.0.0", port=8000)
