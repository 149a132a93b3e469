"""Module boundary tests: compilers stay below the facade, leaves stay standalone."""

from pytest_archon import archrule


def test_exceptions_are_standalone() -> None:
    """Exceptions are imported everywhere and must not import the package back."""
    (
        archrule("exceptions_standalone")
        .match("query_filtering.exceptions")
        .should_not_import("query_filtering.*")
        .check("query_filtering")
    )


def test_operators_are_standalone() -> None:
    (
        archrule("operators_standalone")
        .match("query_filtering.operators")
        .should_not_import("query_filtering.*")
        .check("query_filtering")
    )


def test_predicates_know_nothing_of_requests() -> None:
    """
    The predicate tree is built by compilers but never reaches back into
    parameter handling, the registry or the facade.
    """
    (
        archrule("predicates_independent")
        .match("query_filtering.predicates")
        .should_not_import("query_filtering.compiler")
        .should_not_import("query_filtering.params")
        .should_not_import("query_filtering.registry")
        .should_not_import("query_filtering.parser")
        .check("query_filtering")
    )


def test_components_do_not_import_the_facade() -> None:
    """Only the facade and link helpers may depend on QueryParser."""
    (
        archrule("components_below_facade")
        .match("query_filtering.*")
        .exclude("query_filtering.parser")
        .exclude("query_filtering.query_string")
        .should_not_import("query_filtering.parser")
        .should_not_import("query_filtering.query_string")
        .check("query_filtering")
    )


def test_patch_is_independent_of_query_parsing() -> None:
    (
        archrule("patch_independent")
        .match("query_filtering.patch")
        .should_not_import("query_filtering.compiler")
        .should_not_import("query_filtering.registry")
        .should_not_import("query_filtering.parser")
        .check("query_filtering")
    )


def test_patch_validation_is_independent_of_query_parsing() -> None:
    (
        archrule("patch_validation_independent")
        .match("query_filtering.validation")
        .should_not_import("query_filtering.compiler")
        .should_not_import("query_filtering.registry")
        .should_not_import("query_filtering.parser")
        .check("query_filtering")
    )
