"""One-stop factory for assembling the generation stack.

Usage::

    from edu_master.config import get_settings
    from edu_master.llm import create_generation_client

    client = create_generation_client(get_settings())
    text = await client.generate(system_prompt, user_input)
"""

import structlog

from edu_master.config import Settings
from edu_master.llm.client import GenerationClient
from edu_master.llm.factory import create_provider

logger = structlog.get_logger()


def create_generation_client(settings: Settings) -> GenerationClient:
    """Assemble GenerationClient with the configured provider and retry policy.

    Args:
        settings: Application settings with API keys and retry knobs.

    Returns:
        Configured GenerationClient ready for use.

    Raises:
        ProviderNotConfiguredError: If the selected provider has no key.
    """
    provider = create_provider(settings)
    client = GenerationClient(
        provider,
        max_attempts=settings.llm_max_attempts,
        base_delay=settings.llm_base_delay,
        max_jitter=settings.llm_max_jitter,
    )
    logger.info(
        "generation_client_created",
        provider=provider.provider_name,
        max_attempts=settings.llm_max_attempts,
        base_delay=settings.llm_base_delay,
    )
    return client
