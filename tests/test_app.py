from pathlib import Path

import pytest
from streamlit.testing.v1 import AppTest


@pytest.fixture
def app(monkeypatch, howell_csv):
    monkeypatch.setenv("MCBAYES_DATA", str(howell_csv))
    from mcbayes.data_loader import load_data
    load_data.clear()
    at = AppTest.from_file("../app.py", default_timeout=30)
    at.run()
    yield at
    load_data.clear()


def test_landing_page_renders(app, howell_frame):
    assert not app.exception
    assert app.title[0].value == "Monte Carlo Methods for Bayesian Inference"
    metrics = {m.label: m.value for m in app.metric}
    assert metrics["People"] == f"{len(howell_frame):,}"
    assert metrics["Adults (18+)"] == str(int((howell_frame["age"] >= 18).sum()))


def test_landing_page_lists_every_part(app):
    text = " ".join(md.value for md in app.markdown)
    for part in ("Part I:", "Part II:", "Part III:", "Part IV:", "Part V:"):
        assert part in text


def test_package_long_description_is_the_readme():
    root = Path(__file__).resolve().parent.parent
    assert 'readme = "README.md"' in (root / "pyproject.toml").read_text()
    assert (root / "README.md").read_text().startswith("# Monte Carlo Methods for Bayesian Inference")
