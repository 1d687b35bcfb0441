import os

import requests
import streamlit as st

API_BASE = os.getenv("RENDER_SERVICE_API_BASE", os.getenv("API_BASE", "http://localhost:8080")).rstrip("/")


def parse_values(text: str) -> dict[str, str]:
    """Parse `KEY=value` lines into a substitution map.

    Blank lines and lines starting with `#` are skipped, keys are stripped and
    values are kept verbatim after the first `=`. Lines without `=` map the key
    to an empty string.
    """
    values: dict[str, str] = {}
    for line in text.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        if key:
            values[key] = value
    return values


def _check_health() -> bool:
    try:
        resp = requests.get(f"{API_BASE}/health", timeout=10)
    except requests.RequestException as e:
        st.session_state["error"] = f"Failed to connect to API: {e}"
        return False
    return resp.status_code == 200 and bool(resp.json().get("ok"))


def _submit_render(api_key: str, code: str, src_url: str, values: dict[str, str]) -> dict[str, object] | None:
    payload = {"code": code, "srcUrl": src_url, "values": values, "format": "pdf"}
    try:
        resp = requests.post(
            f"{API_BASE}/render",
            json=payload,
            headers={"x-api-key": api_key},
            timeout=300,
        )
    except requests.RequestException as e:
        st.session_state["error"] = f"Failed to connect to API: {e}"
        return None
    try:
        data = resp.json()
    except ValueError:
        st.session_state["error"] = f"Render failed: {resp.status_code} {resp.text}"
        return None
    if resp.status_code != 200 or not data.get("ok"):
        st.session_state["error"] = f"Render failed: {resp.status_code} {data.get('error', 'unknown')}"
        return None
    return data


def main() -> None:
    st.set_page_config(page_title="Template Render Service", page_icon="📄", layout="centered")
    st.title("📄 Template Render Service")
    st.caption(f"API base: {API_BASE}")

    if st.button("Check health", type="secondary"):
        if _check_health():
            st.success("Service is up")
        else:
            st.error(st.session_state.pop("error", "Service is not healthy"))

    with st.form("render"):
        api_key = st.text_input("x-api-key", type="password")
        code = st.text_input("Template code")
        src_url = st.text_input("Template URL (DOCX or ODT)")
        values_text = st.text_area("Values (one RMGCn=value per line)", height=200)
        submitted = st.form_submit_button("Render", type="primary")

    if submitted:
        st.session_state.pop("error", None)
        with st.spinner("Rendering..."):
            result = _submit_render(api_key, code, src_url, parse_values(values_text))
        if result:
            st.success(f"Stored at {result['path']}")
            st.json(result)

    if err := st.session_state.get("error"):
        st.error(err)


if __name__ == "__main__":
    main()
