from pathlib import Path

import pytest
from fastapi import Response
from normform_html import View


class RecordingView(View):
    """View that records every display() call into a shared event log."""

    def __init__(self, *args, events: list[str], label: str = "view", **kwargs):
        super().__init__(*args, **kwargs)
        self.events = events
        self.label = label

    def display(self) -> Response:
        self.events.append(f"display:{self.label}")
        return super().display()


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Creates a template directory with the templates used across tests."""
    tpl_dir = tmp_path / "templates"
    tpl_dir.mkdir()

    (tpl_dir / "hello.html").write_text("Hello {{ name }}", encoding="utf-8")
    (tpl_dir / "form.html").write_text(
        "{{ title }}|"
        "{% for message in errorMessages or [] %}{{ message }};{% endfor %}|"
        "{{ username.value if username is defined }}",
        encoding="utf-8",
    )
    (tpl_dir / "thanks.html").write_text("Thanks {{ name }}", encoding="utf-8")
    (tpl_dir / "globals.html").write_text(
        "{{ _server.REQUEST_METHOD }}|"
        "{{ _session.user if _session is defined else 'no-session' }}",
        encoding="utf-8",
    )
    (tpl_dir / "broken.html").write_text("{% if %}oops", encoding="utf-8")
    (tpl_dir / "undefined.html").write_text("{{ missing.attr }}", encoding="utf-8")
    (tpl_dir / "divide.html").write_text("{{ amount / 0 }}", encoding="utf-8")
    return tpl_dir


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    return tmp_path / "templates_c"


@pytest.fixture
def events() -> list[str]:
    return []


@pytest.fixture
def make_view(template_dir, cache_dir, events):
    """Factory for recording views bound to the test template directory."""

    def _make(template_name: str = "form.html", *, label: str = "view", **kwargs):
        return RecordingView(
            template_name,
            template_dir,
            cache_dir,
            events=events,
            label=label,
            **kwargs,
        )

    return _make
