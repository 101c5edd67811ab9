# Run from project root: streamlit run snippy/ui.py
# UI talks to backend API (POST /snippets, GET /snippets/{name}, POST /snippets/search, POST /snippets/wiki, POST /snippets/code-style).

import os
from urllib.parse import quote

import requests
import streamlit as st

# Backend config
API_BASE = os.environ.get("API_BASE", "http://localhost:8000")
AGENT_TIMEOUT = 300

st.title("Snippy")

project = st.text_input("Project", value="", placeholder="default-project", key="project").strip() or None

# Show snippets already saved in the project (on every render)
try:
    r = requests.get(f"{API_BASE}/snippets", params={"project": project} if project else None, timeout=10)
    if r.ok:
        data = r.json()
        names = data.get("names") or []
        if names:
            st.caption(f"Snippets in {data.get('project')}:")
            for n in names:
                st.caption(f"  • {n}")
        else:
            st.caption("No snippets in this project yet. Save one below.")
    else:
        st.caption("Could not load snippet list.")
except requests.RequestException:
    st.caption("Backend not reachable. Start the API first.")

# Save
with st.expander("Save a snippet", expanded=True):
    name = st.text_input("Name", key="save_name")
    content = st.text_area("Code", height=240, key="save_content")
    if st.button("Save", key="save_btn"):
        if not name.strip() or not content.strip():
            st.error("Name and code are required.")
        else:
            try:
                r = requests.post(
                    f"{API_BASE}/snippets",
                    json={"name": name, "project": project, "content": content},
                    timeout=60,
                )
                if r.ok:
                    saved = r.json()
                    st.success(f"Saved {saved.get('name')!r} in {saved.get('project')!r}")
                    st.rerun()
                else:
                    st.error(f"Save failed: {r.status_code}: {r.text[:200]}")
            except requests.RequestException as e:
                st.error(f"Save failed: {e}")

# Get by name
with st.expander("Get a snippet"):
    get_name = st.text_input("Name", key="get_name")
    if st.button("Get", key="get_btn") and get_name.strip():
        try:
            r = requests.get(
                f"{API_BASE}/snippets/{quote(get_name.strip(), safe='/')}",
                params={"project": project} if project else None,
                timeout=30,
            )
            if r.status_code == 404:
                st.warning("No snippet with that name in this project.")
            elif r.ok:
                st.code(r.json().get("content", ""))
            else:
                st.error(f"Get failed: {r.status_code}: {r.text[:200]}")
        except requests.RequestException as e:
            st.error(f"Request failed: {e}")

# Similarity search
with st.expander("Search snippets"):
    query = st.text_input("Query", key="search_query")
    top_k = st.slider("Results", min_value=1, max_value=20, value=5, key="search_top_k")
    if st.button("Search", key="search_btn") and query.strip():
        try:
            r = requests.post(
                f"{API_BASE}/snippets/search",
                json={"query": query, "project": project, "top_k": top_k},
                timeout=60,
            )
            if r.ok:
                results = r.json().get("results") or []
                if not results:
                    st.caption("No matches.")
                for hit in results:
                    st.markdown(f"**{hit.get('name')}** (score {hit.get('score', 0):.3f})")
                    st.code(hit.get("content", ""))
            else:
                st.error(f"Search failed: {r.status_code}: {r.text[:200]}")
        except requests.RequestException as e:
            st.error(f"Request failed: {e}")

st.divider()
st.subheader("Generate documents")

user_query = st.text_input("Focus (optional)", key="agent_focus")
col_wiki, col_style = st.columns(2)
endpoint = None
if col_wiki.button("Deep wiki", key="wiki_btn"):
    endpoint = "/snippets/wiki"
if col_style.button("Code style guide", key="style_btn"):
    endpoint = "/snippets/code-style"

if endpoint:
    with st.spinner("Agent is working..."):
        try:
            r = requests.post(
                f"{API_BASE}{endpoint}",
                json={"project": project, "user_query": user_query or None},
                timeout=AGENT_TIMEOUT,
            )
            if r.ok:
                data = r.json()
                tools_used = data.get("tools_used") or []
                if tools_used:
                    st.caption(f"Tools used: {', '.join(tools_used)}")
                st.markdown(data.get("document", ""))
            else:
                st.error(f"Generation failed: {r.status_code}: {r.text[:200]}")
        except requests.RequestException as e:
            st.error(f"Request failed: {e}")
