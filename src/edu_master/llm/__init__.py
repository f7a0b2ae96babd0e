"""LLM infrastructure: providers, schemas, retrying client.

Quick start::

    from edu_master.config import get_settings
    from edu_master.llm import create_generation_client

    client = create_generation_client(get_settings())
    async for fragment in client.generate_stream(system_prompt, user_input):
        ...
"""

from edu_master.llm.client import GenerationClient, classify_failure, format_error
from edu_master.llm.schemas import LLMRequest, LLMResponse
from edu_master.llm.setup import create_generation_client

__all__ = [
    "GenerationClient",
    "LLMRequest",
    "LLMResponse",
    "classify_failure",
    "create_generation_client",
    "format_error",
]
