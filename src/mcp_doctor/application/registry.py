"""Explicit registry of diagnostic probes, populated once at startup."""

from __future__ import annotations

from collections.abc import Iterable

from mcp_doctor.application.probe import DiagnosticTest


class TestRegistry:
    """Ordered collection of probes, queryable by category.

    Registration happens while the application is wired together; runs only
    read from the registry.
    """

    __test__ = False  # keep pytest from collecting this as a test class

    def __init__(self, tests: Iterable[DiagnosticTest] = ()) -> None:
        self._tests: list[DiagnosticTest] = []
        for test in tests:
            self.register(test)

    def register(self, test: DiagnosticTest) -> None:
        if any(existing.name == test.name for existing in self._tests):
            raise ValueError(f"A probe named {test.name!r} is already registered")
        self._tests.append(test)

    def get_all(self) -> list[DiagnosticTest]:
        return list(self._tests)

    def get_by_category(self, category: str) -> list[DiagnosticTest]:
        wanted = category.strip().lower()
        return [test for test in self._tests if test.category == wanted]

    def get_by_categories(self, categories: Iterable[str]) -> list[DiagnosticTest]:
        wanted = {category.strip().lower() for category in categories}
        return [test for test in self._tests if test.category in wanted]

    def available_categories(self) -> list[str]:
        return sorted({test.category for test in self._tests})

    def clear(self) -> None:
        self._tests.clear()

    def __len__(self) -> int:
        return len(self._tests)


def build_default_registry() -> TestRegistry:
    """Return a registry holding the full probe catalogue in execution order."""

    from mcp_doctor.application.probes import default_probes

    return TestRegistry(default_probes())


__all__ = ["TestRegistry", "build_default_registry"]
