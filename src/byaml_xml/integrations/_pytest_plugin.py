"""pytest plugin for byaml-xml.

Auto-discovered by pytest via the pytest11 entry point declared in pyproject.toml.
When the package is installed (even in editable mode), pytest discovers this plugin
automatically -- no conftest.py changes are needed.
"""

from __future__ import annotations

from typing import Any

import pytest

from byaml_xml import ByamlDocument, documents_equivalent, resolve
from byaml_xml.resolve import Pools


@pytest.fixture(scope="session")
def assert_byaml_equivalent() -> Any:
    """Fixture that returns a callable BYAML document equivalence asserter.

    The fixture is session-scoped because the returned callable is stateless.

    Usage in tests::

        def test_round_trip(assert_byaml_equivalent):
            document = load(data)
            assert_byaml_equivalent(parse_xml(to_xml_string(document)), document)

    Returns:
        A callable ``_assert(actual, expected) -> None`` that raises
        ``AssertionError`` when the two documents' trees differ.
    """

    def _assert(actual: ByamlDocument, expected: ByamlDocument) -> None:
        """Assert that two documents hold equivalent trees.

        Raises:
            AssertionError: With both resolved trees in the message.
        """
        if not documents_equivalent(actual, expected):
            raise AssertionError(
                "BYAML documents not equivalent\n"
                f"  actual:   {resolve(actual.root, Pools.of(actual))!r}\n"
                f"  expected: {resolve(expected.root, Pools.of(expected))!r}"
            )

    return _assert
