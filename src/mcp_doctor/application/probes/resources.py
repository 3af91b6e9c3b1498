"""Probes for the resources capability."""

from __future__ import annotations

from collections.abc import Mapping

from mcp_doctor.application.probe import DiagnosticTest, error_text
from mcp_doctor.application.probes.support import duplicates, fetch_resources, pick_resource
from mcp_doctor.domain.models import DiagnosticResult, DoctorConfig, Severity
from mcp_doctor.integrations.mcp_client import DoctorClient

MIME_COVERAGE_THRESHOLD = 0.5
MISSING_RESOURCE_URI = "test://nonexistent/resource/12345"
NOT_FOUND_MARKERS = ("not found", "does not exist", "unknown resource", "-32002", "invalid request")


class _ResourcesProbe(DiagnosticTest):
    category = "features"
    required_capability = "resources"


class ResourceCapabilityProbe(_ResourcesProbe):
    name = "Resources: Capability Declaration"
    description = "Checks that the server answers resources/list"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        try:
            resources = await fetch_resources(client)
        except Exception as exc:
            return self.create_result(
                False,
                "Server does not support the resources capability",
                {"error": error_text(exc)},
                ["Implement resources/list if the server exposes data"],
            )
        return self.create_result(
            True,
            f"Resources capability supported ({len(resources)} resources)",
            {"resourceCount": len(resources)},
        )


class ResourceListingProbe(_ResourcesProbe):
    name = "Resources: Resource Listing"
    description = "Checks that at least one resource is listed and URIs are unique"
    severity = Severity.INFO

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        resources = await fetch_resources(client)
        if not resources:
            return self.create_result(
                False,
                "Server lists no resources",
                {"resourceCount": 0},
                ["Expose resources or stop declaring the resources capability"],
            )
        uris = [str(resource.get("uri")) for resource in resources]
        repeated = duplicates(uris)
        if repeated:
            return self.create_result(
                False,
                f"Duplicate resource URIs found: {', '.join(repeated)}",
                {"resourceCount": len(resources), "duplicates": repeated},
                ["Give every resource a unique URI"],
            )
        return self.create_result(
            True,
            f"Found {len(resources)} resources with unique URIs",
            {"resourceCount": len(resources), "resources": uris},
        )


class ResourceReadingProbe(_ResourcesProbe):
    name = "Resources: Resource Reading"
    description = "Reads a harmless-looking resource"
    severity = Severity.INFO

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        resource = pick_resource(await fetch_resources(client))
        if resource is None:
            return self.create_skipped_result("No resources available")
        uri = str(resource.get("uri"))
        try:
            response = await client.read_resource(uri)
        except Exception as exc:
            return self.create_result(
                False,
                f"Failed to read resource '{uri}'",
                {"uri": uri, "error": error_text(exc)},
                ["Check the resources/read implementation", "Verify listed URIs can be read"],
            )
        contents = response.get("contents") if isinstance(response, Mapping) else None
        if not isinstance(contents, list) or not contents:
            return self.create_result(
                False,
                f"Resource '{uri}' returned no contents",
                {"uri": uri},
                ["Return at least one content item from resources/read"],
            )
        return self.create_result(
            True,
            f"Resource '{uri}' read successfully",
            {"uri": uri, "contentItems": len(contents)},
        )


class MimeTypeProbe(_ResourcesProbe):
    name = "Resources: MIME Type Handling"
    description = "Checks that resources declare their MIME type"
    severity = Severity.INFO

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        resources = await fetch_resources(client)
        if not resources:
            return self.create_result(True, "No resources to check for MIME types", {"resourceCount": 0})
        typed = [resource for resource in resources if resource.get("mimeType")]
        coverage = len(typed) / len(resources)
        details = {
            "resourceCount": len(resources),
            "withMimeType": len(typed),
            "mimeTypes": sorted({str(resource["mimeType"]) for resource in typed}),
        }
        if coverage < MIME_COVERAGE_THRESHOLD:
            return self.create_result(
                False,
                f"Only {len(typed)} of {len(resources)} resources declare a MIME type",
                details,
                ["Declare mimeType on resources so clients can render them"],
            )
        return self.create_result(
            True,
            f"{len(typed)} of {len(resources)} resources declare a MIME type",
            details,
        )


def uri_issues(uri: object) -> list[str]:
    """Describe what is wrong with a listed resource URI."""

    if not isinstance(uri, str):
        return ["missing or invalid URI"]
    issues: list[str] = []
    if uri.strip() != uri:
        issues.append("URI contains leading/trailing whitespace")
    if not uri.strip():
        issues.append("empty URI")
    elif ":" not in uri:
        issues.append("URI should include scheme (e.g., file:, custom:)")
    return issues


class UriValidationProbe(_ResourcesProbe):
    name = "Resources: URI Validation"
    description = "Checks that every listed resource URI is well formed"
    severity = Severity.WARNING

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        resources = await fetch_resources(client)
        if not resources:
            return self.create_skipped_result("No resources available to validate URIs")
        problems: list[str] = []
        valid = 0
        for resource in resources:
            uri = resource.get("uri")
            issues = uri_issues(uri)
            if issues:
                problems.append(f"{uri}: {', '.join(issues)}")
            else:
                valid += 1
        if problems:
            return self.create_result(
                False,
                f"URI validation failed for {len(problems)} resources",
                {"uriIssues": problems, "validUris": valid, "totalResources": len(resources)},
                ["Fix URI format issues", "Ensure URIs follow proper format standards"],
            )
        return self.create_result(
            True,
            f"All {len(resources)} resource URIs are valid",
            {"validUris": valid, "totalResources": len(resources)},
        )


class ResourceNotFoundProbe(_ResourcesProbe):
    name = "Resources: Not Found Handling"
    description = "Reads a URI the server cannot know and expects a clear error"
    severity = Severity.INFO

    async def execute(self, client: DoctorClient, config: DoctorConfig) -> DiagnosticResult:
        try:
            await client.read_resource(MISSING_RESOURCE_URI)
        except Exception as exc:
            message = error_text(exc)
            specific = any(marker in message.lower() for marker in NOT_FOUND_MARKERS)
            details = {
                "testedUri": MISSING_RESOURCE_URI,
                "errorMessage": message,
                "isProperError": specific,
            }
            if specific:
                return self.create_result(True, "Server properly handles non-existent resources", details)
            return self.create_result(
                False,
                "Server returns error but message could be more specific",
                details,
                ["Consider returning more specific error messages for resource not found"],
            )
        return self.create_result(
            False,
            "Server did not return error for non-existent resource",
            {"testedUri": MISSING_RESOURCE_URI},
            [
                "Implement proper error handling for non-existent resources",
                "Return an appropriate error code (e.g., -32002)",
            ],
        )


__all__ = [
    "MISSING_RESOURCE_URI",
    "MimeTypeProbe",
    "ResourceCapabilityProbe",
    "ResourceListingProbe",
    "ResourceNotFoundProbe",
    "ResourceReadingProbe",
    "UriValidationProbe",
    "uri_issues",
]
