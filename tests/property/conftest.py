# tests/property/conftest.py
"""Shared Hypothesis strategies for property-based tests.

Usage:
    from tests.property.conftest import topics, identities

    @given(topic=topics)
    def test_encoding_is_one_segment(topic: str) -> None:
        ...
"""

from __future__ import annotations

from hypothesis import strategies as st

# Any text that can be UTF-8 encoded (no lone surrogates)
utf8_text = st.text(alphabet=st.characters(blacklist_categories=("Cs",)), min_size=1, max_size=40)

# Topic lists as operators write them: comma separated, possibly with odd characters
topics = st.one_of(
    utf8_text,
    st.lists(st.from_regex(r"[A-Za-z0-9._-]{1,20}", fullmatch=True), min_size=1, max_size=5).map(",".join),
)

# Job and pipeline identities: non-blank, no path separators
identities = st.from_regex(r"[A-Za-z0-9][A-Za-z0-9._-]{0,19}", fullmatch=True)

# Surrounding whitespace that resolve() must strip
padding = st.text(alphabet=" \t\n", max_size=3)

# Comma-separated entries without empty ones
list_entries = st.lists(st.from_regex(r"[a-z0-9:.]{1,8}", fullmatch=True), min_size=1, max_size=8)
