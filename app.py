from __future__ import annotations

import logging

import streamlit as st

from stockcount.config import get_settings

st.set_page_config(page_title="Stock Count", page_icon="📦", layout="wide")

logging.basicConfig(level=getattr(logging, get_settings().log_level))

pages = [
    st.Page("home.py", title="Dashboard", icon="🏠"),
    st.Page("pages/1_🏢_Branches.py", title="Branches", icon="🏢"),
    st.Page("pages/2_🏷️_Products.py", title="Products", icon="🏷️"),
    st.Page("pages/3_📝_Daily_Control.py", title="Daily Control", icon="📝"),
    st.Page("pages/4_📊_Reports.py", title="Reports", icon="📊"),
    st.Page("pages/5_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
