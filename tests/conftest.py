import pytest
from fastapi.testclient import TestClient

from fastval.core.engine import RuleEngine
from fastval.main import app


@pytest.fixture()
def client():
    return TestClient(app)


@pytest.fixture()
def compile_calls(monkeypatch):
    """
    Records every RuleEngine.compile call made during the test.

    Classes must be created inside the test (or after the fixture runs) for
    their first compilation to be counted.
    """
    calls = []
    original = RuleEngine.compile

    def _counting(self, schema):
        calls.append(schema)
        return original(self, schema)

    monkeypatch.setattr(RuleEngine, "compile", _counting)
    return calls
