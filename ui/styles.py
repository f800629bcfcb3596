from __future__ import annotations

import streamlit as st

APP_CSS = r"""
html, body, [class*="st-"] {
  font-family: "IBM Plex Sans", ui-sans-serif, system-ui, -apple-system,
    BlinkMacSystemFont, "Segoe UI", sans-serif;
}

[data-testid="stSidebar"] {
  border-right: 1px solid rgba(17, 24, 39, 0.08);
}

[data-testid="stSidebar"] [data-testid="stVerticalBlock"] {
  gap: 0.6rem;
}

.pn-header {
  padding: 0.25rem 0 0.75rem 0;
}

.pn-title {
  font-size: 1.9rem;
  font-weight: 700;
  letter-spacing: -0.02em;
}

.pn-subtitle {
  color: rgba(55, 65, 81, 0.85);
  font-size: 0.95rem;
}
"""


def inject_global_styles() -> None:
    st.markdown(f"<style>{APP_CSS}</style>", unsafe_allow_html=True)
