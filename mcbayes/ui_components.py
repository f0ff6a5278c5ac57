"""Shared UI components: section headers, callout boxes, model listings, quizzes."""
import streamlit as st

from mcbayes.constants import PART_TITLES

_CONCEPT_STYLE = (
    "background-color:#EEF6F4; padding:18px 22px; border-radius:8px; "
    "border-left:5px solid #2A9D8F; margin:10px 0;"
)


def section_header(number, title, part=None):
    """Render a deck section header with its part label."""
    if part:
        st.caption(f"Part {part}: {PART_TITLES.get(part, '')}")
    st.title(f"Section {number}: {title}")
    st.divider()


def concept_box(title, content):
    """Shaded theory panel; ``content`` may contain inline HTML."""
    st.markdown(
        f'<div style="{_CONCEPT_STYLE}"><h4 style="color:#264653; margin-top:0;">{title}</h4>'
        f'<p style="color:#1D3557;">{content}</p></div>',
        unsafe_allow_html=True,
    )


def formula_box(title, formula, explanation=None):
    """A titled LaTeX formula in a bordered panel."""
    with st.container(border=True):
        st.markdown(f"**{title}**")
        st.latex(formula)
        if explanation:
            st.caption(explanation)


def insight_box(text):
    st.info(f"**Key insight.** {text}", icon="💡")


def warning_box(text):
    st.warning(f"**Common mistake.** {text}", icon="⚠️")


def code_example(code, title="Show code", language="python"):
    """Collapsed code listing."""
    with st.expander(title):
        st.code(code.strip("\n"), language=language)


def model_listing(code, dialect, caption=None):
    """Show a model written in an engine's own language (BUGS or Stan), always expanded."""
    st.markdown(f"**The model in {dialect}**")
    st.code(code.strip(), language="stan" if dialect.lower() == "stan" else "r")
    if caption:
        st.caption(caption)


def pros_cons(pros, cons, title_pros="Advantages", title_cons="Disadvantages"):
    """Two-column list of advantages and disadvantages."""
    left, right = st.columns(2)
    left.markdown(f"**{title_pros}**\n\n" + "\n".join(f"- {p}" for p in pros))
    right.markdown(f"**{title_cons}**\n\n" + "\n".join(f"- {c}" for c in cons))


def engine_missing_box(error):
    """Explain that an external engine is unavailable and stop the page."""
    st.warning(
        f"**Engine not available.** {error}. The rest of the deck runs on the hand-written "
        "samplers; this section needs the real engine to show real output."
    )
    st.stop()


def quiz(question, options, correct_idx, explanation="", key="quiz"):
    """Multiple-choice check. Returns None until answered, then whether the answer was right."""
    st.subheader("Check Yourself")
    answer = st.radio(question, options, key=key, index=None)
    if answer is None:
        return None
    correct = answer == options[correct_idx]
    if correct:
        st.success("Correct!")
    else:
        st.error(f"Not quite. The answer is: **{options[correct_idx]}**")
    if explanation:
        st.caption(explanation)
    return correct


def takeaways(points):
    st.subheader("Key Takeaways")
    st.markdown("\n".join(f"- {p}" for p in points))


def _page_path(page):
    return page if page == "app.py" else f"pages/{page}"


def navigation(prev_label=None, next_label=None, prev_page=None, next_page=None):
    """Previous / next links at the foot of a section."""
    left, _, right = st.columns([1, 2, 1])
    if prev_label:
        left.page_link(_page_path(prev_page), label=f"← {prev_label}")
    if next_label:
        right.page_link(_page_path(next_page), label=f"{next_label} →")
