from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest

PAGES = sorted((Path(__file__).resolve().parent.parent / "pages").glob("*.py"))


def _errors(at):
    # prev/next links only resolve when the page runs under app.py
    return [e.message for e in at.exception if "Could not find page" not in e.message]


@pytest.fixture
def data_env(monkeypatch, howell_csv):
    monkeypatch.setenv("MCBAYES_DATA", str(howell_csv))
    from mcbayes.data_loader import load_data
    load_data.clear()
    yield
    load_data.clear()


def test_every_section_is_present():
    assert [p.name[:2] for p in PAGES] == [f"{i:02d}" for i in range(1, 11)]


@pytest.mark.parametrize("page", PAGES, ids=lambda p: p.stem)
def test_page_renders_with_defaults(data_env, page):
    at = AppTest.from_file(str(page), default_timeout=180)
    at.run()
    assert _errors(at) == []
    assert at.title[0].value.startswith("Section ")


@pytest.mark.parametrize("page", PAGES, ids=lambda p: p.stem)
def test_page_warns_and_stops_when_filters_leave_no_rows(data_env, page):
    at = AppTest.from_file(str(page), default_timeout=60)
    at.session_state["selected_sexes"] = []
    at.run()
    assert _errors(at) == []
    assert len(at.warning) >= 1
    assert not [r for r in at.radio if r.key and r.key.endswith("_quiz1")]


SAMPLER_PAGES = {"05": "s5", "08": "s8", "09": "s9", "10": "s10"}


@pytest.mark.parametrize("scale", [0.05, 10.0])
@pytest.mark.parametrize(
    "page", [p for p in PAGES if p.name[:2] in SAMPLER_PAGES], ids=lambda p: p.stem,
)
def test_sampler_pages_survive_short_thinned_metropolis_runs(data_env, page, scale):
    prefix = SAMPLER_PAGES[page.name[:2]]
    at = AppTest.from_file(str(page), default_timeout=180)
    at.run()
    if prefix != "s5":
        at.selectbox(key=f"{prefix}_source").set_value("metropolis")
        at.slider(key=f"{prefix}_thin").set_value(10)
        at.run()
    at.slider(key=f"{prefix}_chains").set_value(1)
    at.slider(key=f"{prefix}_draws").set_value(200)
    scale_keys = {s.key for s in at.slider}
    if f"{prefix}_scale" in scale_keys:
        at.slider(key=f"{prefix}_scale").set_value(scale)
    at.run()
    assert _errors(at) == []
