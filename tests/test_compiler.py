import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from fastval.core.compiler import get_compiled
from fastval.core.engine import RuleCompileError
from fastval.core.registry import registry
from fastval.decorators import Alphabet, Field

from tests.helpers import build_schema


def test_compiled_validator_is_cached_per_type(compile_calls):
    User = build_schema("User", name=Alphabet())

    first = get_compiled(User)
    second = get_compiled(User)

    assert first is second
    assert len(compile_calls) == 1


def test_compile_runs_once_regardless_of_call_count(compile_calls):
    User = build_schema("User", name=Alphabet())

    for _ in range(5):
        get_compiled(User)
        assert get_compiled(User)({"name": "ok"}) is True

    assert len(compile_calls) == 1


def test_first_compile_wins_on_differing_messages():
    User = build_schema("User", name=Alphabet())

    first = get_compiled(User, {"string": "first {field}"})
    second = get_compiled(User, {"string": "second {field}"})

    assert first is second
    [record] = second({"name": 5})
    assert record.message == "first name"


def test_validation_schema_compiles_eagerly_with_its_messages(compile_calls):
    User = build_schema("User", messages={"required": "{field} is missing"}, name=Alphabet())

    assert len(compile_calls) == 1
    assert registry.peek(User).compiled is not None
    [record] = get_compiled(User, {"required": "ignored"})({})
    assert record.message == "name is missing"


def test_type_without_declarations_compiles_to_empty_schema(compile_calls):
    class Plain:
        pass

    compiled = get_compiled(Plain)
    assert compile_calls == [{}]
    assert compiled({"anything": 1}) is True


def test_compile_error_propagates_unchanged():
    Broken = build_schema("Broken", weird=Field(type="bogus"))

    with pytest.raises(RuleCompileError, match="Invalid 'bogus' type"):
        get_compiled(Broken)
    assert registry.peek(Broken).compiled is None


def test_concurrent_first_use_compiles_once(compile_calls):
    User = build_schema("User", name=Alphabet())
    barrier = threading.Barrier(8)

    def _compile(_):
        barrier.wait()
        return get_compiled(User)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(_compile, range(8)))

    assert len(compile_calls) == 1
    assert all(r is results[0] for r in results)
