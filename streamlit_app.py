"""Streamlit editor for the CV Maker API."""

import base64
import os
import uuid
from typing import Any, Dict, List, Optional
import httpx
import streamlit as st
import streamlit.components.v1 as components
from loguru import logger

# Configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")
CVS_ENDPOINT = f"{API_BASE_URL}/api/v1/cvs"
PREVIEW_ENDPOINT = f"{API_BASE_URL}/api/v1/cv/preview"
EXPORT_ENDPOINT = f"{API_BASE_URL}/api/v1/cv/export"
TEMPLATES_ENDPOINT = f"{API_BASE_URL}/api/v1/templates"
ASSISTANT_ENDPOINT = f"{API_BASE_URL}/api/v1/assistant"

CEFR_LEVELS = ["A1", "A2", "B1", "B2", "C1", "C2", "Native"]
SKILL_LEVELS = ["Beginner", "Intermediate", "Advanced", "Expert"]
LOCALES = {"lv": "Latviešu", "ru": "Русский", "en": "English"}

# Page configuration
st.set_page_config(
    page_title="CV Maker",
    page_icon="📄",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: bold;
        color: #2563eb;
        margin-bottom: 1rem;
    }
    .success-box {
        background-color: #d4edda;
        padding: 1rem;
        border-radius: 0.5rem;
        border-left: 4px solid #28a745;
        margin-top: 1rem;
    }
</style>
""", unsafe_allow_html=True)


def api_request(method: str, url: str, timeout: float = 30.0, **kwargs) -> Optional[httpx.Response]:
    """
    Call the CV Maker API and report errors in the page.

    Args:
        method: HTTP method
        url: Endpoint URL
        timeout: Request timeout in seconds

    Returns:
        The response if successful, None otherwise
    """
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
    except httpx.HTTPStatusError as e:
        try:
            detail = e.response.json().get("detail", str(e))
        except ValueError:
            detail = str(e)
        st.error(f"Kļūda: {detail}")
    except httpx.HTTPError as e:
        st.error(f"Neizdevās sazināties ar API: {str(e)}")
    return None


def load_or_create_cv(locale: str) -> Optional[Dict[str, Any]]:
    """Latest stored CV, or a freshly created one."""
    try:
        with httpx.Client(timeout=10.0) as client:
            response = client.get(f"{CVS_ENDPOINT}/latest")
            if response.status_code == 200:
                return response.json()
    except httpx.HTTPError as e:
        logger.warning(f"Could not load the latest CV: {e}")
    response = api_request("POST", CVS_ENDPOINT, json={"language": locale})
    return response.json() if response else None


def save_cv(cv: Dict[str, Any]) -> bool:
    """Store the CV being edited."""
    response = api_request("PUT", f"{CVS_ENDPOINT}/{cv['id']}", json=cv)
    if response:
        st.session_state.cv = response.json()
        st.session_state.dirty = False
        return True
    return False


def autosave_cv(cv: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Queue the CV for a background save on the server.

    Failures are logged and return None; only the explicit save button
    reports errors in the page.
    """
    try:
        with httpx.Client(timeout=5.0) as client:
            response = client.post(f"{CVS_ENDPOINT}/{cv['id']}/autosave", json=cv)
            response.raise_for_status()
            return response.json()
    except httpx.HTTPError as e:
        logger.warning(f"Auto-save request for CV {cv['id']} failed: {e}")
    return None


def mark_dirty() -> None:
    st.session_state.dirty = True


def entry_editor(section: str, title: str, fields: Dict[str, Any], describe) -> None:
    """
    List, add and remove entries of a repeating section.

    Args:
        section: CV section name, e.g. "workExperience"
        title: Expander title
        fields: Field name -> default value (str, bool or list of choices)
        describe: Function returning a one-line label for an entry
    """
    cv = st.session_state.cv
    entries: List[Dict[str, Any]] = cv.get(section, [])

    with st.expander(f"{title} ({len(entries)})"):
        for entry in entries:
            col_label, col_delete = st.columns([5, 1])
            col_label.write(describe(entry))
            if col_delete.button("🗑️", key=f"delete-{section}-{entry['id']}"):
                cv[section] = [e for e in entries if e["id"] != entry["id"]]
                mark_dirty()
                st.rerun()

        with st.form(f"add-{section}", clear_on_submit=True):
            values: Dict[str, Any] = {}
            for name, default in fields.items():
                if isinstance(default, bool):
                    values[name] = st.checkbox(name, value=default)
                elif isinstance(default, list):
                    values[name] = st.selectbox(name, default)
                else:
                    values[name] = st.text_input(name, value=default)
            if st.form_submit_button("➕ Pievienot"):
                values["id"] = str(uuid.uuid4())
                for name in ("achievements", "certifications"):
                    if name in values:
                        values[name] = [line.strip() for line in values[name].split(";") if line.strip()]
                if "yearsOfExperience" in values:
                    values["yearsOfExperience"] = float(values["yearsOfExperience"]) if values["yearsOfExperience"] else None
                cv[section] = entries + [values]
                mark_dirty()
                st.rerun()


def template_options(cv: Dict[str, Any], templates: List[Dict[str, Any]]) -> Dict[str, str]:
    """
    Template id -> picker label.

    A CV whose stored template is no longer registered keeps it as the first
    option, so opening the CV never switches its template.
    """
    options = {t["id"]: f"{t['name']}{' ⭐' if t['isPremium'] else ''}" for t in templates}
    if cv["template"] not in options:
        options = {cv["template"]: f"{cv['template']} (pašreizējā)", **options}
    return options


def main():
    """Main Streamlit app."""

    st.markdown('<div class="main-header">📄 CV Maker</div>', unsafe_allow_html=True)

    with st.sidebar:
        st.header("🔍 Servera statuss")
        try:
            with httpx.Client(timeout=2.0) as client:
                response = client.get(f"{API_BASE_URL}/health")
                if response.status_code == 200:
                    st.success("✅ API darbojas")
                else:
                    st.warning(f"⚠️  API atbild ar kodu: {response.status_code}")
        except httpx.ConnectError:
            st.error("❌ API nedarbojas")
            st.code("uvicorn cvmaker.main:app --reload", language="bash")
            return

    if "cv" not in st.session_state:
        cv = load_or_create_cv("lv")
        if cv is None:
            return
        st.session_state.cv = cv
        st.session_state.dirty = False

    cv = st.session_state.cv
    info = cv["personalInfo"]

    with st.sidebar:
        st.divider()
        st.header("⚙️ Iestatījumi")
        locale_ids = list(LOCALES)
        current_locale = cv.get("language") if cv.get("language") in LOCALES else "lv"
        locale = st.selectbox(
            "Valoda", locale_ids, index=locale_ids.index(current_locale), format_func=LOCALES.get, key="locale",
        )
        if locale != cv.get("language"):
            cv["language"] = locale
            mark_dirty()
        autosave = st.checkbox("Automātiskā saglabāšana", value=True, key="autosave")

    editor_col, preview_col = st.columns([1, 1])

    with editor_col:
        st.header("Personīgā informācija")
        for name in ("firstName", "lastName", "email", "phone", "website", "linkedin"):
            value = st.text_input(name, value=info.get(name) or "", on_change=mark_dirty, key=f"info-{name}")
            info[name] = value
        for name in ("city", "country"):
            info["address"][name] = st.text_input(
                name, value=info["address"].get(name, ""), on_change=mark_dirty, key=f"address-{name}"
            )
        photo = st.file_uploader("Foto", type=["png", "jpg", "jpeg"])
        if photo is not None:
            encoded = base64.b64encode(photo.getvalue()).decode("ascii")
            uploaded = f"data:{photo.type};base64,{encoded}"
            if info.get("photo") != uploaded:
                info["photo"] = uploaded
                mark_dirty()

        cv["professionalSummary"] = st.text_area(
            "Profesionālais kopsavilkums",
            value=cv.get("professionalSummary") or "",
            max_chars=500,
            on_change=mark_dirty,
        )

        entry_editor(
            "workExperience", "Darba pieredze",
            {"position": "", "company": "", "location": "", "startDate": "", "endDate": "",
             "current": False, "description": "", "achievements": ""},
            lambda e: f"**{e['position']}**, {e['company']}",
        )
        entry_editor(
            "education", "Izglītība",
            {"degree": "", "institution": "", "location": "", "startDate": "", "endDate": "", "current": False},
            lambda e: f"**{e['degree']}**, {e['institution']}",
        )
        entry_editor(
            "languageSkills", "Valodu prasmes",
            {"language": "", "proficiency": CEFR_LEVELS, "certifications": ""},
            lambda e: f"{e['language']} ({e['proficiency']})",
        )
        entry_editor(
            "itSkills", "IT prasmes",
            {"name": "", "category": "", "proficiency": SKILL_LEVELS, "yearsOfExperience": ""},
            lambda e: f"{e['name']} ({e['proficiency']})",
        )

        if autosave and st.session_state.dirty:
            status = autosave_cv(cv)
            if status is None:
                st.caption("⚠️ Automātiskā saglabāšana nav pieejama")
            else:
                st.session_state.dirty = False
                if status["failures"]:
                    st.caption(f"⚠️ Automātiskā saglabāšana neizdevās: {status['lastError']}")
                else:
                    st.caption(f"Tiks saglabāts pēc {status['delay']:g} s")

        if st.button("💾 Saglabāt", use_container_width=True):
            if save_cv(cv):
                st.markdown('<div class="success-box">✅ CV saglabāts</div>', unsafe_allow_html=True)

    with preview_col:
        st.header("Veidne")
        templates_response = api_request("GET", TEMPLATES_ENDPOINT)
        templates = templates_response.json() if templates_response else []
        options = template_options(cv, templates)
        template_ids = list(options)
        selected = st.selectbox(
            "Aktīvā veidne",
            template_ids,
            index=template_ids.index(cv["template"]),
            format_func=options.get,
            key="template",
        )
        if selected != cv["template"]:
            # Local edits go first, the template switch replaces the session CV
            if not st.session_state.dirty or save_cv(cv):
                response = api_request("PUT", f"{CVS_ENDPOINT}/{cv['id']}/template", json={"templateId": selected})
                if response:
                    st.session_state.cv = response.json()
                    st.rerun()

        if st.checkbox("Rādīt paraugu ar piemēra datiem"):
            sample = api_request("GET", f"{TEMPLATES_ENDPOINT}/{selected}/preview", params={"locale": locale})
            if sample:
                components.html(sample.text, height=900, scrolling=True)

        st.header("Priekšskatījums")
        preview = api_request("POST", PREVIEW_ENDPOINT, json={"cv": cv, "locale": locale})
        if preview:
            components.html(preview.text, height=900, scrolling=True)

        if st.button("📄 Lejupielādēt PDF", use_container_width=True, type="primary"):
            with st.spinner("⏳ Ģenerē PDF..."):
                response = api_request("POST", EXPORT_ENDPOINT, timeout=60.0, json={"cv": cv, "locale": locale})
            if response:
                disposition = response.headers.get("content-disposition", "")
                filename = disposition.split("filename=")[-1].strip('"') or "cv.pdf"
                st.download_button(
                    label="📥 Saglabāt PDF",
                    data=response.content,
                    file_name=filename,
                    mime="application/pdf",
                    use_container_width=True,
                    key="cv_download",
                )

        with st.expander("🤖 AI asistents"):
            health = api_request("GET", f"{ASSISTANT_ENDPOINT}/health", timeout=10.0)
            if health and health.json()["status"] == "healthy":
                task = st.selectbox("Uzdevums", ["summary", "improve_cv", "analyze_cv", "free"])
                prompt = st.text_area("Papildu norādes")
                if st.button("Jautāt"):
                    with st.spinner("⏳ AI domā..."):
                        answer = api_request(
                            "POST", f"{ASSISTANT_ENDPOINT}/generate", timeout=120.0,
                            json={"task": task, "language": locale, "prompt": prompt, "cv": cv},
                        )
                    if answer:
                        result = answer.json()
                        if result["success"]:
                            st.write(result["content"])
                        else:
                            st.error(result["error"])
            else:
                st.info("AI asistents nav pieejams. Pārbaudiet Ollama instalāciju.")


if __name__ == "__main__":
    main()
