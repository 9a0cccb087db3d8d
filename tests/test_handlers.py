import json

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from fastval.api.handlers import ValidationExceptionHandler, install_exception_handlers
from fastval.api.pipe import Validated
from fastval.core.exceptions import ValidationFailure
from fastval.decorators import Email

from tests.helpers import build_schema


def _app(show_stack: bool) -> FastAPI:
    Contact = build_schema("Contact", strict=True, contact=Email())
    app = FastAPI()
    install_exception_handlers(app, show_stack=show_stack)

    @app.post("/contacts")
    def create_contact(payload: dict = Depends(Validated(Contact))):
        return payload

    return app


def test_catch_builds_error_body_without_stack():
    response = ValidationExceptionHandler().catch(ValidationFailure({"name": "The 'name' field in body is required."}))
    assert response.status_code == 400
    assert json.loads(response.body) == {
        "status": 400,
        "message": "Validation failed",
        "payload": {"name": "The 'name' field in body is required."},
    }


def test_catch_includes_stack_when_enabled():
    response = ValidationExceptionHandler(show_stack=True).catch(ValidationFailure({}))
    body = json.loads(response.body)
    assert body["payload"] == {}
    assert "ValidationFailure" in body["stack"]


def test_handler_is_wired_into_the_app():
    client = TestClient(_app(show_stack=False))
    r = client.post("/contacts", json={"contact": "nope"})
    assert r.status_code == 400
    assert r.json() == {
        "status": 400,
        "message": "Validation failed",
        "payload": {"contact": "The 'contact' field in body must be a valid e-mail."},
    }

    r = client.post("/contacts", json={"contact": "ada@example.com"})
    assert r.status_code == 200
    assert r.json() == {"contact": "ada@example.com"}


def test_stack_is_returned_when_show_stack_is_on():
    client = TestClient(_app(show_stack=True))
    r = client.post("/contacts", json={"contact": "ada@example.com", "bogus": 1})
    assert r.status_code == 400
    body = r.json()
    assert body["payload"] == {"forbiddenKeys": "The object contains forbidden keys: 'bogus'."}
    assert "Traceback" in body["stack"]
