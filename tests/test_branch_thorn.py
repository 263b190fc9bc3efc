"""Tests for branch and thorn declarations and their normalisation."""

from __future__ import annotations

import pytest

from entangle import (
    WILDCARD,
    Branch,
    BranchProtocol,
    InlineBranch,
    InlineThorn,
    Ok,
    PipelineConfigError,
    SeedBuilder,
    Thorn,
    ThornProtocol,
    as_branch,
    as_thorn,
    branch,
    entangle,
    grow,
)
from entangle.filter import layers_of


def add(x):
    return Ok(x + 1)


def passthrough(next):
    return next


class AddTest(Branch, layers=["test"]):
    def run(self, state):
        return Ok(state + 1)


class LogThorn(Thorn, layers="dev"):
    pass


class DuckBranch:
    """Satisfies BranchProtocol without inheriting from Branch."""

    layers = frozenset({"prod"})

    def run(self, state):
        return Ok(state)


class Capability:
    """Declares its layers through a method instead of an attribute."""

    def layers(self):
        return {"test"}

    def run(self, state):
        return Ok(state * 2)


@pytest.mark.unit
class TestBranch:
    def test_class_layers_are_normalised(self):
        assert AddTest.layers == frozenset({"test"})
        assert AddTest().run(1) == Ok(2)

    def test_defaults(self):
        class Noop(Branch):
            pass

        assert Noop.layers == WILDCARD
        assert Noop().run("state") == Ok("state")

    def test_layers_are_inherited(self):
        class AddMore(AddTest):
            pass

        assert AddMore.layers == frozenset({"test"})

    def test_satisfies_protocol(self):
        assert isinstance(AddTest(), BranchProtocol)
        assert isinstance(branch(add), BranchProtocol)

    def test_inline_branch(self):
        unit = branch(add, layers=["test", "dev"])
        assert isinstance(unit, InlineBranch)
        assert unit.layers == frozenset({"test", "dev"})
        assert unit.run(1) == Ok(2)
        assert branch(add).layers == WILDCARD

    def test_decorator_form(self):
        @branch(layers=["prod"])
        def subtract(x):
            return Ok(x - 1)

        assert isinstance(subtract, InlineBranch)
        assert subtract.layers == frozenset({"prod"})
        assert subtract(3) == Ok(2)

    def test_inline_branch_requires_callable(self):
        with pytest.raises(PipelineConfigError):
            branch(42)


@pytest.mark.unit
class TestAsBranch:
    def test_branch_class_is_instantiated(self):
        unit = as_branch(AddTest)
        assert isinstance(unit, AddTest)

    def test_instances_are_kept(self):
        instance = AddTest()
        inline = branch(add)
        duck = DuckBranch()
        assert as_branch(instance) is instance
        assert as_branch(inline) is inline
        assert as_branch(duck) is duck

    def test_tuple_form(self):
        unit = as_branch((add, {"layers": ["test"]}))
        assert unit == InlineBranch(add, frozenset({"test"}))
        assert as_branch((add, None)).layers == WILDCARD

    @pytest.mark.parametrize(
        "declaration",
        [(add,), (add, {"layers": ["test"]}, "extra"), (add, {"timeout": 3}), (add, ["test"])],
    )
    def test_malformed_tuples(self, declaration):
        with pytest.raises(PipelineConfigError):
            as_branch(declaration)

    def test_bare_callable(self):
        unit = as_branch(add)
        assert isinstance(unit, InlineBranch)
        assert unit.layers == WILDCARD

    @pytest.mark.parametrize("declaration", [42, "add", None, int, LogThorn, LogThorn()])
    def test_rejects_non_branches(self, declaration):
        with pytest.raises(PipelineConfigError):
            as_branch(declaration)

    def test_rejects_inline_thorn(self):
        with pytest.raises(PipelineConfigError):
            as_branch(grow(passthrough))


@pytest.mark.unit
class TestThorn:
    def test_class_layers(self):
        assert LogThorn.layers == frozenset({"dev"})
        assert isinstance(LogThorn(), ThornProtocol)

    def test_default_run_passes_through(self):
        assert LogThorn().run(add) is add

    def test_grow(self):
        unit = grow(passthrough, layers=["test"])
        assert isinstance(unit, InlineThorn)
        assert unit.layers == frozenset({"test"})
        assert unit.run(add) is add

    def test_grow_decorator_form(self):
        @grow(layers="prod")
        def wrap(next):
            return next

        assert isinstance(wrap, InlineThorn)
        assert wrap.layers == frozenset({"prod"})


@pytest.mark.unit
class TestAsThorn:
    def test_thorn_class_is_instantiated(self):
        assert isinstance(as_thorn(LogThorn), LogThorn)

    def test_inline_branch_becomes_thorn(self):
        unit = as_thorn(branch(passthrough, layers=["test"]))
        assert unit == InlineThorn(passthrough, frozenset({"test"}))

    def test_tuple_and_callable(self):
        assert as_thorn((passthrough, {"layers": ["dev"]})).layers == frozenset({"dev"})
        assert as_thorn(passthrough).layers == WILDCARD

    @pytest.mark.parametrize("declaration", [42, None, AddTest, AddTest(), (passthrough,)])
    def test_rejects_non_thorns(self, declaration):
        with pytest.raises(PipelineConfigError):
            as_thorn(declaration)


@pytest.mark.unit
class TestLayersMethod:
    @pytest.fixture
    def seed(self):
        return SeedBuilder().layers(["dev", "test"]).active_layer("test").build()

    def test_method_is_called(self):
        assert layers_of(Capability()) == frozenset({"test"})

    def test_runs_when_layer_active(self, seed):
        pipeline = entangle("double", [Capability()], seed)
        assert pipeline(4) == Ok(8)

    def test_skipped_when_layer_inactive(self):
        seed = SeedBuilder().layers(["dev", "test"]).active_layer("dev").build()
        pipeline = entangle("double", [Capability()], seed)
        assert pipeline(4) == Ok(4)

    def test_branch_subclass_with_method(self, seed):
        class Triple(Branch):
            def layers(self):
                return "test"

            def run(self, state):
                return Ok(state * 3)

        assert layers_of(Triple()) == frozenset({"test"})
        assert entangle("triple", [Triple], seed)(2) == Ok(6)

    def test_thorn_subclass_with_method(self, seed):
        class Bump(Thorn):
            def layers(self):
                return ["dev"]

            def run(self, next):
                return lambda state: next(state + 100)

        assert layers_of(Bump()) == frozenset({"dev"})
        with_bump = SeedBuilder().layers(["dev", "test"]).active_layer("test").thorn(Bump).build()
        assert with_bump.thorns == ()

    @pytest.mark.parametrize("declared", [42, object()])
    def test_invalid_declaration(self, declared):
        class Broken:
            def run(self, state):
                return Ok(state)

        unit = Broken()
        unit.layers = declared
        with pytest.raises(PipelineConfigError, match="invalid layers"):
            layers_of(unit)

    def test_invalid_method_result(self):
        class Broken:
            def layers(self):
                return 3.5

            def run(self, state):
                return Ok(state)

        with pytest.raises(PipelineConfigError):
            entangle("broken", [Broken()])
