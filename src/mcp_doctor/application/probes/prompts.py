"""Probes for the prompts capability."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from mcp_doctor.application.probe import DiagnosticTest, error_text
from mcp_doctor.application.probes.support import (
    duplicates,
    fetch_prompts,
    pick_prompt,
    rejection_reason,
    sample_prompt_arguments,
)
from mcp_doctor.domain.models import DiagnosticResult, DoctorConfig, Severity
from mcp_doctor.integrations.mcp_client import DoctorClient


class _PromptsProbe(DiagnosticTest):
    category = "prompts"
    severity = Severity.INFO
    required_capability = "prompts"


class PromptCapabilityProbe(_PromptsProbe):
    name = "Prompts: Capability Declaration"
    description = "Checks that the server answers prompts/list"

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        try:
            prompts = await fetch_prompts(client)
        except Exception as exc:
            return self.create_result(
                False,
                "Server does not support the prompts capability",
                {"error": error_text(exc)},
                ["Implement prompts/list if the server offers prompt templates"],
            )
        return self.create_result(
            True,
            f"Prompts capability supported ({len(prompts)} prompts)",
            {"promptCount": len(prompts)},
        )


class PromptListingProbe(_PromptsProbe):
    name = "Prompts: Prompt Listing"
    description = "Checks that at least one prompt is listed and names are unique"

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        prompts = await fetch_prompts(client)
        if not prompts:
            return self.create_result(
                False,
                "Server lists no prompts",
                {"promptCount": 0},
                ["Expose prompts or stop declaring the prompts capability"],
            )
        names = [str(prompt.get("name")) for prompt in prompts]
        repeated = duplicates(names)
        if repeated:
            return self.create_result(
                False,
                f"Duplicate prompt names found: {', '.join(repeated)}",
                {"promptCount": len(prompts), "duplicates": repeated},
                ["Give every prompt a unique name"],
            )
        return self.create_result(
            True,
            f"Found {len(prompts)} prompts with unique names",
            {"promptCount": len(prompts), "prompts": names},
        )


class PromptRetrievalProbe(_PromptsProbe):
    name = "Prompts: Prompt Retrieval"
    description = "Retrieves a prompt with generated arguments"

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        prompt = pick_prompt(await fetch_prompts(client))
        if prompt is None:
            return self.create_skipped_result("No prompts available")
        prompt_name = str(prompt.get("name"))
        arguments = sample_prompt_arguments(prompt)
        try:
            response = await client.get_prompt(prompt_name, arguments or None)
        except Exception as exc:
            return self.create_result(
                False,
                f"Failed to retrieve prompt '{prompt_name}'",
                {"prompt": prompt_name, "arguments": arguments, "error": error_text(exc)},
                ["Check the prompts/get implementation", "Verify declared prompt arguments"],
            )
        messages = response.get("messages") if isinstance(response, Mapping) else None
        if not isinstance(messages, list) or not messages:
            return self.create_result(
                False,
                f"Prompt '{prompt_name}' returned no messages",
                {"prompt": prompt_name, "arguments": arguments},
                ["Return at least one message from prompts/get"],
            )
        return self.create_result(
            True,
            f"Prompt '{prompt_name}' retrieved successfully",
            {"prompt": prompt_name, "arguments": arguments, "messageCount": len(messages)},
        )


def _declared_arguments(prompt: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    arguments = prompt.get("arguments") or []
    return [argument for argument in arguments if isinstance(argument, Mapping) and argument.get("name")]


def rendered_text(response: Any) -> str:
    """Flatten the message contents of a prompts/get response into one string."""

    messages = response.get("messages") if isinstance(response, Mapping) else None
    if isinstance(messages, Mapping):
        messages = [messages]
    parts: list[str] = []
    for message in messages or []:
        content = message.get("content") if isinstance(message, Mapping) else None
        if isinstance(content, str):
            parts.append(content)
        elif content is not None:
            parts.append(json.dumps(content, default=str))
    return "\n".join(parts)


class PromptArgumentValidationProbe(_PromptsProbe):
    name = "Prompts: Argument Validation"
    description = "Retrieves a prompt without its required arguments and expects a rejection"

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        prompts = await fetch_prompts(client)
        if not prompts:
            return self.create_skipped_result("No prompts available to test argument validation")
        prompt = next(
            (
                entry
                for entry in prompts
                if any(argument.get("required") for argument in _declared_arguments(entry))
            ),
            None,
        )
        if prompt is None:
            return self.create_result(
                False,
                "No prompts with required arguments found",
                {"totalPrompts": len(prompts)},
                ["Consider adding required arguments to prompts for better validation testing"],
            )
        prompt_name = str(prompt.get("name"))
        reason = await rejection_reason(client.get_prompt(prompt_name, {}))
        if reason is None:
            return self.create_result(
                False,
                f"Prompt did not validate required arguments ({prompt_name})",
                {"promptName": prompt_name},
                [
                    "Implement proper argument validation",
                    "Return appropriate error for missing required arguments",
                ],
            )
        return self.create_result(
            True,
            f"Prompt properly validates required arguments ({prompt_name})",
            {"promptName": prompt_name, "error": reason},
        )


class TemplateRenderingProbe(_PromptsProbe):
    name = "Prompts: Template Rendering"
    description = "Checks that argument values are substituted into rendered prompts"

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        prompts = await fetch_prompts(client)
        if not prompts:
            return self.create_skipped_result("No prompts available to test template rendering")
        prompt = next((entry for entry in prompts if _declared_arguments(entry)), None)
        if prompt is None:
            return self.create_result(
                False,
                "No prompts with arguments found for template testing",
                {"totalPrompts": len(prompts)},
                ["Consider adding parameterized prompts for template functionality"],
            )
        prompt_name = str(prompt.get("name"))
        # distinctive values so they can be spotted in the rendered text
        arguments = {
            str(argument["name"]): f"TEST_VALUE_{str(argument['name']).upper()}"
            for argument in _declared_arguments(prompt)
        }
        try:
            response = await client.get_prompt(prompt_name, arguments)
        except Exception as exc:
            return self.create_result(
                False,
                f"Template rendering failed ({prompt_name})",
                {"promptName": prompt_name, "testArgs": arguments, "error": error_text(exc)},
            )
        text = rendered_text(response)
        substituted = [f'{name}="{value}"' for name, value in arguments.items() if value in text]
        details = {"promptName": prompt_name, "testArgs": arguments, "substitutionFound": substituted}
        if not substituted:
            return self.create_result(
                False,
                f"No template substitution detected ({prompt_name})",
                details,
                [
                    "Verify prompt templates use argument substitution",
                    "Check template syntax implementation",
                ],
            )
        return self.create_result(True, f"Template rendering working ({prompt_name})", details)


__all__ = [
    "PromptArgumentValidationProbe",
    "PromptCapabilityProbe",
    "PromptListingProbe",
    "PromptRetrievalProbe",
    "TemplateRenderingProbe",
    "rendered_text",
]
