import streamlit as st

SIDEBAR_CUSTOM_CSS = """
<style>
section[data-testid="stSidebar"] {
    min-width: 260px;
}

/* Navigation entries rendered as full-width rows instead of radio dots */
section[data-testid="stSidebar"] .stRadio > div[role='radiogroup'] > label[data-baseweb="radio"] {
    font-size: 15px;
    font-weight: 500;
    padding: 10px 8px;
    border-radius: 8px;
    margin-bottom: 4px;
    width: 100%;
    display: block;
    box-sizing: border-box;
}

section[data-testid="stSidebar"] .stRadio > div[role='radiogroup'] label[data-baseweb="radio"] > div:first-child {
    display: none;
}

section[data-testid="stSidebar"] .stRadio label[data-testid="stWidgetLabel"] {
    display: none;
}
</style>
"""

STAT_CARD_CSS = """
<style>
div[data-testid="stMetricValue"] {
    font-size: 1.75rem;
    font-weight: 700;
}
</style>
"""

SIDEBAR_HIGHLIGHT_CSS = """
<style>
section[data-testid="stSidebar"] .stRadio > div[role='radiogroup'] > label[data-baseweb="radio"]:has(input:checked) {{
    background: {background};
    color: {color} !important;
}}
</style>
"""


def load_custom_css():
    st.markdown(SIDEBAR_CUSTOM_CSS, unsafe_allow_html=True)
    st.markdown(STAT_CARD_CSS, unsafe_allow_html=True)
    if st.context.theme.type == "dark":
        highlight = SIDEBAR_HIGHLIGHT_CSS.format(background="#0e1117", color="#fff")
    else:
        highlight = SIDEBAR_HIGHLIGHT_CSS.format(background="#d0d0d0", color="#222")
    st.markdown(highlight, unsafe_allow_html=True)
