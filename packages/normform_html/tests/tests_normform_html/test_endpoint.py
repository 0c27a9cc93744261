import asyncio
import threading

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from normform_core import GenericParameter
from normform_core.config import normform_settings
from normform_core.logging import correlation_id
from normform_html import FormController, redirect_to


class RegisterForm(FormController):
    """Sign-up form: requires a username, redirects on success."""

    success_url = "/welcome"
    seen_request_ids: list[str | None] = []

    def is_valid(self) -> bool:
        self.seen_request_ids.append(correlation_id.get())
        if self.is_empty_post_field("username"):
            self.add_error("Please enter a username.")
        assert self.current_view is not None
        self.current_view.set_parameter(self.post_parameter("username"))
        self.current_view.set_parameter(
            GenericParameter(name="errorMessages", value=self.error_messages)
        )
        return not self.error_messages

    def business(self) -> None:
        redirect_to(self.success_url, {"user": self.post_parameter("username").value})


class GhostForm(FormController):
    """Drops its view on success, so nothing is rendered."""

    def is_valid(self) -> bool:
        return True

    def business(self) -> None:
        self.current_view = None


@pytest.fixture
def client(template_dir, cache_dir) -> TestClient:
    app = FastAPI()
    options = {
        "template_directory": template_dir,
        "template_cache_directory": cache_dir,
    }
    app.add_api_route(
        "/register",
        RegisterForm.as_endpoint(
            "form.html",
            parameters=[GenericParameter(name="title", value="Register")],
            **options,
        ),
        methods=["GET", "POST"],
    )
    app.add_api_route(
        "/custom",
        RegisterForm.as_endpoint("form.html", success_url="/custom-ok", **options),
        methods=["GET", "POST"],
    )
    app.add_api_route(
        "/ghost",
        GhostForm.as_endpoint("hello.html", **options),
        methods=["GET", "POST"],
    )
    app.add_api_route(
        "/missing",
        GhostForm.as_endpoint("nope.html", **options),
        methods=["GET"],
    )
    return TestClient(app)


class TestFormEndpoint:
    def test_get_renders_initial_form(self, client):
        response = client.get("/register")
        assert response.status_code == 200
        assert response.text == "Register||"

    def test_invalid_post_renders_errors_and_input(self, client):
        response = client.post("/register", data={"username": "   "})
        assert response.status_code == 200
        assert response.text == "Register|Please enter a username.;|"

    def test_valid_post_redirects(self, client):
        response = client.post(
            "/register", data={"username": " ada "}, follow_redirects=False
        )
        assert response.status_code == 302
        assert response.headers["location"] == "/welcome?user=ada"

    def test_zero_is_a_valid_username(self, client):
        response = client.post("/register", data={"username": "0"}, follow_redirects=False)
        assert response.headers["location"] == "/welcome?user=0"

    def test_initkwargs_override_attributes(self, client):
        response = client.post(
            "/custom", data={"username": "ada"}, follow_redirects=False
        )
        assert response.headers["location"] == "/custom-ok?user=ada"

    def test_errors_do_not_leak_between_requests(self, client):
        client.post("/register", data={})
        response = client.get("/register")
        assert "Please enter a username." not in response.text

    def test_no_view_returns_empty_response(self, client):
        response = client.post("/ghost", data={})
        assert response.status_code == 200
        assert response.text == ""

    def test_missing_template_returns_server_error(self, client):
        response = client.get("/missing")
        assert response.status_code == 500
        assert "nope.html" in response.text

    def test_request_id_header_is_used_for_tracing(self, client):
        RegisterForm.seen_request_ids.clear()
        client.post("/register", data={}, headers={"X-Request-ID": "req-77"})
        client.post("/register", data={})

        first, second = RegisterForm.seen_request_ids
        assert first == "req-77"
        assert second is not None and second != "req-77"
        assert correlation_id.get() is None

    def test_tracing_can_be_disabled(self, client, monkeypatch):
        monkeypatch.setattr(normform_settings, "ENABLE_REQUEST_ID", False)
        RegisterForm.seen_request_ids.clear()
        client.post("/register", data={}, headers={"X-Request-ID": "req-77"})
        assert RegisterForm.seen_request_ids == [None]

    def test_invalid_initkwarg_is_rejected(self):
        with pytest.raises(TypeError) as excinfo:
            RegisterForm.as_endpoint("form.html", not_an_attribute=1)
        assert "received an invalid keyword" in str(excinfo.value)


class TallyForm(FormController):
    """Appends to the list held by its initial `visits` parameter."""

    def is_valid(self) -> bool:
        return True

    def business(self) -> None:
        assert self.current_view is not None
        for param in self.current_view.get_parameters():
            if param.name == "visits":
                param.value.append("visit")


def test_initial_parameter_values_are_not_shared(template_dir, cache_dir):
    """
    Requirement: Mutating an initial parameter's value in one request does
    not change what the next request starts from.
    """
    (template_dir / "tally.html").write_text(
        "{{ visits | join(',') }}", encoding="utf-8"
    )
    visits = GenericParameter(name="visits", value=[])
    app = FastAPI()
    app.add_api_route(
        "/tally",
        TallyForm.as_endpoint(
            "tally.html",
            template_directory=template_dir,
            template_cache_directory=cache_dir,
            parameters=[visits],
        ),
        methods=["GET", "POST"],
    )
    client = TestClient(app)

    assert client.post("/tally", data={}).text == "visit"
    assert client.post("/tally", data={}).text == "visit"
    assert visits.value == []


class RendezvousForm(FormController):
    """Blocks in `business()` until a second request reaches the same point."""

    rendezvous: threading.Barrier | None = None

    def is_valid(self) -> bool:
        return True

    def business(self) -> None:
        assert self.rendezvous is not None
        self.rendezvous.wait()
        redirect_to("/done", {"user": self.post_parameter("user").value})


@pytest.mark.asyncio
async def test_blocking_business_does_not_stall_other_requests(template_dir, cache_dir):
    """
    Requirement: Two requests whose `business()` block on each other both
    finish, so the lifecycle does not run on the event loop.
    """
    app = FastAPI()
    app.add_api_route(
        "/meet",
        RendezvousForm.as_endpoint(
            "hello.html",
            template_directory=template_dir,
            template_cache_directory=cache_dir,
            rendezvous=threading.Barrier(2, timeout=5),
        ),
        methods=["POST"],
    )

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        first, second = await asyncio.gather(
            client.post("/meet", data={"user": "ada"}),
            client.post("/meet", data={"user": "bob"}),
        )

    assert first.status_code == 302
    assert second.status_code == 302
    assert first.headers["location"] == "/done?user=ada"
    assert second.headers["location"] == "/done?user=bob"
